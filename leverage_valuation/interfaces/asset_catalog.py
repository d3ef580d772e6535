"""Asset catalog protocol — mint/account to asset lookups."""
from typing import Protocol

from solders.pubkey import Pubkey

from ..models import AssetInfo


class AssetCatalog(Protocol):
    """Abstract interface for resolving addresses to priced assets."""

    def by_mint_address(self, mint: Pubkey | str) -> AssetInfo: ...

    def by_account_address(self, account: Pubkey | str) -> AssetInfo: ...
