"""Price oracle protocol — price feed abstraction."""
from decimal import Decimal
from typing import Iterable, Protocol


class PriceOracle(Protocol):
    """Abstract interface for fetching positive USD quotes."""

    async def quote(self, asset_id: str) -> Decimal: ...

    async def fetch_quotes(self, asset_ids: Iterable[str]) -> dict[str, Decimal]: ...
