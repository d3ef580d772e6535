"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_EVEN, Decimal
from enum import IntEnum

from solders.pubkey import Pubkey

CENT = Decimal("0.01")


class PoolVaultKind(IntEnum):
    """Vault family a leveraged farm deposits its LP tokens into."""

    RAYDIUM = 0
    ORCA = 1


@dataclass(frozen=True)
class DerivedAddress:
    address: Pubkey
    bump: int


@dataclass(frozen=True)
class VaultState:
    total_vault_balance: int
    total_vlp_shares: int


@dataclass(frozen=True)
class MintState:
    supply: int
    decimals: int


@dataclass(frozen=True)
class BorrowLeg:
    borrowed_amount_wads: int
    borrow_reserve: Pubkey


@dataclass(frozen=True)
class ObligationRecord:
    """Leveraged position: collateral vault shares plus two borrow legs."""

    vault_shares: int
    coin_decimals: int
    pc_decimals: int
    borrow_one: BorrowLeg
    borrow_two: BorrowLeg


@dataclass(frozen=True)
class AmmPoolState:
    need_take_pnl_coin: int
    need_take_pnl_pc: int


@dataclass(frozen=True)
class OpenOrdersState:
    base_token_total: int
    quote_token_total: int


@dataclass(frozen=True)
class AmmAdjustment:
    """Pending-settlement and open-order corrections for a two-sided AMM."""

    amm: AmmPoolState
    open_orders: OpenOrdersState


@dataclass(frozen=True)
class TokenBalance:
    amount: int
    decimals: int


@dataclass(frozen=True)
class PoolSnapshot:
    """Raw pool reserves; balances in smallest units, decimals as exponents."""

    total_supply: int
    supply_decimals: int
    coin_balance: int
    coin_decimals: int
    pc_balance: int
    pc_decimals: int


@dataclass(frozen=True)
class AssetInfo:
    asset_id: str
    name: str


@dataclass(frozen=True)
class PricedAsset:
    name: str
    price: Decimal


@dataclass(frozen=True)
class PoolAccounts:
    lp_mint: Pubkey
    pool_coin_token_account: Pubkey
    pool_pc_token_account: Pubkey
    base_mint: Pubkey
    quote_mint: Pubkey


@dataclass(frozen=True)
class AmmAccounts:
    amm_id: Pubkey
    amm_open_orders: Pubkey


@dataclass(frozen=True)
class PositionValuation:
    """Point-in-time USD valuation of a leveraged LP position."""

    borrowed_amount: Decimal
    virtual_value: Decimal
    net_value: Decimal
    debt_value: Decimal
    borrowed_asset: str
    deposited_lp_tokens: Decimal = Decimal(0)
    pool_tvl: Decimal = Decimal(0)
    unit_lp_value: Decimal = Decimal(0)

    def as_usd(self) -> PositionValuation:
        """Return a copy with USD amounts rounded to cents for display."""
        return replace(
            self,
            virtual_value=_to_cents(self.virtual_value),
            net_value=_to_cents(self.net_value),
            debt_value=_to_cents(self.debt_value),
            pool_tvl=_to_cents(self.pool_tvl),
        )


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_EVEN)
