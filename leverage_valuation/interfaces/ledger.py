"""Ledger reader protocol — raw account access."""
from typing import Protocol

from solders.pubkey import Pubkey

from ..models import TokenBalance


class LedgerReader(Protocol):
    """Abstract interface for reading accounts from the ledger.

    ``get_account`` returns ``None`` for an absent account; transport
    failures raise ``TransportError``; a node rejecting the request raises
    ``RequestRejected``.
    """

    async def get_account(self, address: Pubkey) -> bytes | None: ...

    async def get_token_balance(self, address: Pubkey) -> TokenBalance: ...
