"""Integration tests for pool status reads against a mocked ledger."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from solders.pubkey import Pubkey

from account_data import (
    AMM_ID,
    AMM_OPEN_ORDERS,
    COIN_ACCOUNT,
    LP_MINT,
    PC_ACCOUNT,
    amm_info_bytes,
    mint_bytes,
    open_orders_bytes,
)
from leverage_valuation.errors import AccountNotFound, LayoutMismatch, MalformedData
from leverage_valuation.models import AmmAccounts, PoolSnapshot, TokenBalance
from leverage_valuation.protocols.solfarm.pool_status import PoolStatusReader, gather_reads


def _ledger(
    accounts: dict[Pubkey, bytes], balances: dict[Pubkey, TokenBalance]
) -> AsyncMock:
    ledger = AsyncMock()
    ledger.get_account = AsyncMock(side_effect=lambda address: accounts.get(address))
    ledger.get_token_balance = AsyncMock(side_effect=lambda address: balances[address])
    return ledger


BALANCES = {
    COIN_ACCOUNT: TokenBalance(amount=200_000_000, decimals=6),
    PC_ACCOUNT: TokenBalance(amount=300_000_000_000, decimals=9),
}


class TestRead:
    @pytest.mark.asyncio
    async def test_builds_snapshot(self) -> None:
        ledger = _ledger({LP_MINT: mint_bytes(400_000_000, 6)}, BALANCES)

        snapshot = await PoolStatusReader(ledger).read(LP_MINT, COIN_ACCOUNT, PC_ACCOUNT)

        assert snapshot == PoolSnapshot(
            total_supply=400_000_000,
            supply_decimals=6,
            coin_balance=200_000_000,
            coin_decimals=6,
            pc_balance=300_000_000_000,
            pc_decimals=9,
        )

    @pytest.mark.asyncio
    async def test_zero_supply_is_valid(self) -> None:
        ledger = _ledger({LP_MINT: mint_bytes(0, 6)}, BALANCES)

        snapshot = await PoolStatusReader(ledger).read(LP_MINT, COIN_ACCOUNT, PC_ACCOUNT)

        assert snapshot.total_supply == 0
        assert snapshot.supply_decimals == 6

    @pytest.mark.asyncio
    async def test_missing_mint_raises(self) -> None:
        ledger = _ledger({}, BALANCES)

        with pytest.raises(AccountNotFound) as exc_info:
            await PoolStatusReader(ledger).read(LP_MINT, COIN_ACCOUNT, PC_ACCOUNT)

        assert exc_info.value.address == LP_MINT

    @pytest.mark.asyncio
    async def test_truncated_mint_raises(self) -> None:
        ledger = _ledger({LP_MINT: mint_bytes(1, 6)[:40]}, BALANCES)

        with pytest.raises(LayoutMismatch):
            await PoolStatusReader(ledger).read(LP_MINT, COIN_ACCOUNT, PC_ACCOUNT)

    @pytest.mark.asyncio
    async def test_negative_balance_raises(self) -> None:
        balances = dict(BALANCES)
        balances[PC_ACCOUNT] = TokenBalance(amount=-1, decimals=6)
        ledger = _ledger({LP_MINT: mint_bytes(1, 6)}, balances)

        with pytest.raises(MalformedData, match="pc_balance"):
            await PoolStatusReader(ledger).read(LP_MINT, COIN_ACCOUNT, PC_ACCOUNT)


class TestReadAmmAdjustment:
    @pytest.mark.asyncio
    async def test_decodes_both_accounts(self) -> None:
        ledger = _ledger(
            {
                AMM_ID: amm_info_bytes(need_take_pnl_coin=11, need_take_pnl_pc=22),
                AMM_OPEN_ORDERS: open_orders_bytes(base_token_total=33, quote_token_total=44),
            },
            {},
        )

        adjustment = await PoolStatusReader(ledger).read_amm_adjustment(
            AmmAccounts(amm_id=AMM_ID, amm_open_orders=AMM_OPEN_ORDERS)
        )

        assert adjustment.amm.need_take_pnl_coin == 11
        assert adjustment.amm.need_take_pnl_pc == 22
        assert adjustment.open_orders.base_token_total == 33
        assert adjustment.open_orders.quote_token_total == 44

    @pytest.mark.asyncio
    async def test_missing_open_orders_raises(self) -> None:
        ledger = _ledger({AMM_ID: amm_info_bytes(0, 0)}, {})

        with pytest.raises(AccountNotFound, match="open orders"):
            await PoolStatusReader(ledger).read_amm_adjustment(
                AmmAccounts(amm_id=AMM_ID, amm_open_orders=AMM_OPEN_ORDERS)
            )


class TestGatherReads:
    @pytest.mark.asyncio
    async def test_returns_results_in_order(self) -> None:
        async def read(value: int) -> int:
            await asyncio.sleep(0)
            return value

        assert await gather_reads(read(1), read(2), read(3)) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_failure_cancels_pending_reads(self) -> None:
        cancelled: list[str] = []

        async def slow_read() -> bytes:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append("slow")
                raise
            return b""

        async def failing_read() -> bytes:
            raise AccountNotFound(LP_MINT, "LP mint")

        with pytest.raises(AccountNotFound):
            await gather_reads(slow_read(), failing_read())

        assert cancelled == ["slow"]
