"""Pure valuation math for leveraged farm positions — no I/O.

Every step runs in ``VALUATION_CONTEXT``: 78 significant digits with
banker's rounding. That is enough to hold a u128 wad amount times a u64
balance without loss, so results only round when a quotient does not
terminate. Rounding to cents is left to ``PositionValuation.as_usd``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Context, Decimal, localcontext

from ...errors import DivisionByZero, EmptyPosition, NoBorrowRecord, PriceUnavailable
from ...models import (
    AmmAdjustment,
    BorrowLeg,
    ObligationRecord,
    PoolSnapshot,
    PositionValuation,
    PricedAsset,
    VaultState,
)

logger = logging.getLogger(__name__)

VALUATION_CONTEXT = Context(prec=78, rounding=ROUND_HALF_EVEN)

# LP tokens are recorded in 6-decimal base units
DEFAULT_LP_UNIT = 10**6
WAD_UNIT = 10**18


@dataclass(frozen=True)
class SelectedBorrow:
    """The active borrow leg plus the decimals of the asset it borrowed."""

    leg: BorrowLeg
    decimals: int
    side: str


def _pow10(exponent: int) -> Decimal:
    return Decimal(10) ** exponent


def _require_price(name: str, price: Decimal) -> Decimal:
    if price <= 0:
        raise PriceUnavailable(name, f"non-positive price {price}")
    return price


def deposited_lp_tokens(vault_shares: int, vault: VaultState) -> Decimal:
    """Convert vault shares to LP tokens via the vault balance/share ratio."""
    if vault.total_vlp_shares == 0:
        raise DivisionByZero("total_vlp_shares")
    with localcontext(VALUATION_CONTEXT):
        lp_tokens = (
            Decimal(vault_shares) * Decimal(vault.total_vault_balance)
        ) / Decimal(vault.total_vlp_shares)
    if lp_tokens == 0:
        raise EmptyPosition(vault_shares)
    return lp_tokens


def reserve_balances(
    snapshot: PoolSnapshot, adjustment: AmmAdjustment | None = None
) -> tuple[Decimal, Decimal]:
    """Coin and pc reserves in native units.

    With an AMM adjustment, tokens resting in open orders are added back
    and pending pnl settlements are taken out before normalizing.
    """
    coin = Decimal(snapshot.coin_balance)
    pc = Decimal(snapshot.pc_balance)
    with localcontext(VALUATION_CONTEXT):
        if adjustment is not None:
            coin = (
                coin
                + adjustment.open_orders.base_token_total
                - adjustment.amm.need_take_pnl_coin
            )
            pc = (
                pc
                + adjustment.open_orders.quote_token_total
                - adjustment.amm.need_take_pnl_pc
            )
        return coin / _pow10(snapshot.coin_decimals), pc / _pow10(snapshot.pc_decimals)


def pool_tvl(
    coin_balance: Decimal, pc_balance: Decimal, price_coin: Decimal, price_pc: Decimal
) -> Decimal:
    with localcontext(VALUATION_CONTEXT):
        return coin_balance * price_coin + pc_balance * price_pc


def unit_lp_value(tvl: Decimal, snapshot: PoolSnapshot) -> Decimal:
    """USD value of one whole LP token."""
    if snapshot.total_supply == 0:
        raise DivisionByZero("total_supply")
    with localcontext(VALUATION_CONTEXT):
        supply = Decimal(snapshot.total_supply) / _pow10(snapshot.supply_decimals)
        return tvl / supply


def select_borrow_leg(obligation: ObligationRecord) -> SelectedBorrow | None:
    """Pick ``borrow_one`` when it carries debt, else ``borrow_two``.

    Returns ``None`` when neither leg has an outstanding amount.
    """
    if obligation.borrow_one.borrowed_amount_wads != 0:
        return SelectedBorrow(obligation.borrow_one, obligation.coin_decimals, "coin")
    if obligation.borrow_two.borrowed_amount_wads != 0:
        return SelectedBorrow(obligation.borrow_two, obligation.pc_decimals, "pc")
    return None


def borrowed_amount(selected: SelectedBorrow, wad_unit: int = WAD_UNIT) -> Decimal:
    with localcontext(VALUATION_CONTEXT):
        return (
            Decimal(selected.leg.borrowed_amount_wads)
            / Decimal(wad_unit)
            / _pow10(selected.decimals)
        )


def valuate(
    obligation: ObligationRecord,
    snapshot: PoolSnapshot,
    vault: VaultState,
    adjustment: AmmAdjustment | None,
    price_coin: Decimal,
    price_pc: Decimal,
    debt_asset: PricedAsset | None,
    *,
    lp_unit: int = DEFAULT_LP_UNIT,
    wad_unit: int = WAD_UNIT,
    require_borrow: bool = True,
) -> PositionValuation:
    """Value a leveraged LP position.

    virtual value = deposited LP × unit LP value ÷ ``lp_unit``;
    debt value = borrowed amount × price of the borrowed asset;
    net value = virtual − debt, which may be negative.

    Args:
        debt_asset: name and price of the asset the active borrow leg's
            reserve lends out. Required whenever a leg carries debt.
        require_borrow: raise ``NoBorrowRecord`` when both legs are zero.
            Callers that only want the gross value pass ``False``.
    """
    _require_price("coin", price_coin)
    _require_price("pc", price_pc)

    lp_tokens = deposited_lp_tokens(obligation.vault_shares, vault)
    coin_balance, pc_balance = reserve_balances(snapshot, adjustment)
    tvl = pool_tvl(coin_balance, pc_balance, price_coin, price_pc)
    unit_value = unit_lp_value(tvl, snapshot)

    with localcontext(VALUATION_CONTEXT):
        virtual_value = lp_tokens * unit_value / Decimal(lp_unit)

    selected = select_borrow_leg(obligation)
    if selected is None:
        if require_borrow:
            raise NoBorrowRecord(
                obligation.vault_shares,
                obligation.borrow_one.borrow_reserve,
                obligation.borrow_two.borrow_reserve,
            )
        borrowed = Decimal(0)
        debt_value = Decimal(0)
        borrowed_asset = ""
    else:
        if debt_asset is None:
            raise PriceUnavailable(
                str(selected.leg.borrow_reserve), "no quote for borrowed asset"
            )
        _require_price(debt_asset.name, debt_asset.price)
        borrowed = borrowed_amount(selected, wad_unit)
        with localcontext(VALUATION_CONTEXT):
            debt_value = borrowed * debt_asset.price
        borrowed_asset = debt_asset.name

    with localcontext(VALUATION_CONTEXT):
        net_value = virtual_value - debt_value

    logger.debug(
        "Valuation: lp=%s tvl=%s unit=%s virtual=%s debt=%s net=%s",
        lp_tokens,
        tvl,
        unit_value,
        virtual_value,
        debt_value,
        net_value,
    )

    return PositionValuation(
        borrowed_amount=borrowed,
        virtual_value=virtual_value,
        net_value=net_value,
        debt_value=debt_value,
        borrowed_asset=borrowed_asset,
        deposited_lp_tokens=lp_tokens,
        pool_tvl=tvl,
        unit_lp_value=unit_value,
    )
