"""Read LP mint supply, reserve balances and AMM corrections for a pair."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable

from solders.pubkey import Pubkey

from ...errors import AccountNotFound, MalformedData
from ...interfaces.ledger import LedgerReader
from ...models import AmmAccounts, AmmAdjustment, PoolSnapshot
from .layouts import decode_amm_info, decode_mint, decode_open_orders

logger = logging.getLogger(__name__)


async def gather_reads(*reads: Awaitable[Any]) -> list[Any]:
    """Await ledger reads concurrently; on the first failure cancel the rest.

    The first exception propagates unchanged once every sibling has
    finished or been cancelled.
    """
    tasks = [asyncio.ensure_future(read) for read in reads]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class PoolStatusReader:
    """Aggregate on-chain pool state into normalized snapshots."""

    def __init__(self, ledger: LedgerReader) -> None:
        self._ledger = ledger

    async def _require_account(self, address: Pubkey, role: str) -> bytes:
        data = await self._ledger.get_account(address)
        if data is None:
            raise AccountNotFound(address, role)
        return data

    async def read(
        self, lp_mint: Pubkey, coin_reserve: Pubkey, pc_reserve: Pubkey
    ) -> PoolSnapshot:
        """Fetch the LP mint and both reserve balances concurrently."""
        mint_data, coin, pc = await gather_reads(
            self._require_account(lp_mint, "LP mint"),
            self._ledger.get_token_balance(coin_reserve),
            self._ledger.get_token_balance(pc_reserve),
        )
        mint = decode_mint(mint_data)

        snapshot = PoolSnapshot(
            total_supply=mint.supply,
            supply_decimals=mint.decimals,
            coin_balance=coin.amount,
            coin_decimals=coin.decimals,
            pc_balance=pc.amount,
            pc_decimals=pc.decimals,
        )
        for name in ("coin_balance", "coin_decimals", "pc_balance", "pc_decimals"):
            if getattr(snapshot, name) < 0:
                raise MalformedData(name, f"negative value {getattr(snapshot, name)}")

        logger.debug("Pool snapshot for %s: %s", lp_mint, snapshot)
        return snapshot

    async def read_amm_adjustment(self, accounts: AmmAccounts) -> AmmAdjustment:
        """Fetch the AMM pnl counters and its open orders concurrently."""
        amm_data, orders_data = await gather_reads(
            self._require_account(accounts.amm_id, "AMM"),
            self._require_account(accounts.amm_open_orders, "AMM open orders"),
        )
        return AmmAdjustment(
            amm=decode_amm_info(amm_data),
            open_orders=decode_open_orders(orders_data),
        )
