"""SolFarm leveraged-farm adapter — fetches state and values positions."""
from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Mapping

from solders.pubkey import Pubkey

from ...chains.solana.keys import parse_pubkey
from ...config import PoolConfig, ProtocolConfig
from ...errors import AccountNotFound
from ...interfaces.asset_catalog import AssetCatalog
from ...interfaces.ledger import LedgerReader
from ...interfaces.price_oracle import PriceOracle
from ...models import (
    AmmAccounts,
    PoolAccounts,
    PoolVaultKind,
    PositionValuation,
    PricedAsset,
    VaultState,
)
from . import engine
from .layouts import decode_vault
from .obligation import ObligationLocator
from .pool_status import PoolStatusReader, gather_reads

logger = logging.getLogger(__name__)


def pool_accounts_from_config(pool: PoolConfig) -> PoolAccounts:
    return PoolAccounts(
        lp_mint=parse_pubkey(pool.lp_mint, "lp_mint"),
        pool_coin_token_account=parse_pubkey(
            pool.pool_coin_token_account, "pool_coin_token_account"
        ),
        pool_pc_token_account=parse_pubkey(
            pool.pool_pc_token_account, "pool_pc_token_account"
        ),
        base_mint=parse_pubkey(pool.base_mint, "base_mint"),
        quote_mint=parse_pubkey(pool.quote_mint, "quote_mint"),
    )


def amm_accounts_from_config(pool: PoolConfig) -> AmmAccounts | None:
    """AMM accounts only matter for Raydium vaults with resting orders."""
    if pool.vault_kind != "raydium" or not pool.amm_id or not pool.amm_open_orders:
        return None
    return AmmAccounts(
        amm_id=parse_pubkey(pool.amm_id, "amm_id"),
        amm_open_orders=parse_pubkey(pool.amm_open_orders, "amm_open_orders"),
    )


class SolFarmAdapter:
    """Value SolFarm leveraged LP positions on Solana."""

    def __init__(
        self,
        ledger: LedgerReader,
        oracle: PriceOracle,
        catalog: AssetCatalog,
        config: ProtocolConfig,
    ) -> None:
        self._ledger = ledger
        self._oracle = oracle
        self._catalog = catalog
        self._config = config
        self._program_id = parse_pubkey(config.program_id, "program_id")
        self._locator = ObligationLocator(
            ledger, self._program_id, range(config.obligation_slots)
        )
        self._pool_reader = PoolStatusReader(ledger)

    @property
    def protocol_name(self) -> str:
        return "solfarm"

    async def _read_vault(self, vault_address: Pubkey, kind: PoolVaultKind) -> VaultState:
        data = await self._ledger.get_account(vault_address)
        if data is None:
            raise AccountNotFound(vault_address, f"{kind.name.lower()} vault")
        return decode_vault(data, kind)

    async def _resolve_prices(
        self, asset_ids: set[str], prices: Mapping[str, Decimal] | None
    ) -> dict[str, Decimal]:
        """Use caller-supplied quotes where present, fetch the rest at once."""
        resolved = {a: prices[a] for a in asset_ids if prices and a in prices}
        missing = asset_ids - resolved.keys()
        if missing:
            resolved.update(await self._oracle.fetch_quotes(sorted(missing)))
        return resolved

    async def compute_position_value(
        self,
        user_address: Pubkey | str,
        farm_index: int,
        pool_vault_kind: PoolVaultKind | int,
        vault_address: Pubkey | str,
        pool_accounts: PoolAccounts,
        amm_accounts: AmmAccounts | None = None,
        *,
        prices: Mapping[str, Decimal] | None = None,
        require_borrow: bool = True,
    ) -> PositionValuation:
        """Compute the point-in-time valuation of one leveraged position.

        Args:
            user_address: authority that owns the user-farm account.
            farm_index: farm identifier used in the user-farm seeds.
            pool_vault_kind: which vault layout holds the LP tokens.
            vault_address: vault the obligation's shares are drawn on.
            pool_accounts: LP mint, reserve token accounts and pair mints.
            amm_accounts: AMM id and open orders; when given, reserves are
                corrected for open orders and pending pnl.
            prices: optional pre-resolved quotes keyed by asset id; any
                quote not supplied is fetched from the oracle.
            require_borrow: raise ``NoBorrowRecord`` for an unlevered
                obligation instead of valuing it with zero debt.
        """
        user = parse_pubkey(user_address, "user_address")
        vault = parse_pubkey(vault_address, "vault_address")
        kind = PoolVaultKind(pool_vault_kind)

        obligation = await self._locator.locate(user, farm_index)

        amm_read = (
            self._pool_reader.read_amm_adjustment(amm_accounts)
            if amm_accounts is not None
            else asyncio.sleep(0, result=None)
        )
        vault_state, snapshot, adjustment = await gather_reads(
            self._read_vault(vault, kind),
            self._pool_reader.read(
                pool_accounts.lp_mint,
                pool_accounts.pool_coin_token_account,
                pool_accounts.pool_pc_token_account,
            ),
            amm_read,
        )

        coin_asset = self._catalog.by_mint_address(pool_accounts.base_mint)
        pc_asset = self._catalog.by_mint_address(pool_accounts.quote_mint)
        selected = engine.select_borrow_leg(obligation)
        debt_info = (
            self._catalog.by_account_address(selected.leg.borrow_reserve)
            if selected is not None
            else None
        )

        asset_ids = {coin_asset.asset_id, pc_asset.asset_id}
        if debt_info is not None:
            asset_ids.add(debt_info.asset_id)
        quotes = await self._resolve_prices(asset_ids, prices)

        logger.info("Reserve0: %s price: %s USD", coin_asset.name, quotes[coin_asset.asset_id])
        logger.info("Reserve1: %s price: %s USD", pc_asset.name, quotes[pc_asset.asset_id])

        debt_asset = (
            PricedAsset(name=debt_info.name, price=quotes[debt_info.asset_id])
            if debt_info is not None
            else None
        )

        valuation = engine.valuate(
            obligation,
            snapshot,
            vault_state,
            adjustment,
            quotes[coin_asset.asset_id],
            quotes[pc_asset.asset_id],
            debt_asset,
            lp_unit=self._config.lp_unit,
            wad_unit=self._config.wad_unit,
            require_borrow=require_borrow,
        )
        logger.info(
            "Position %s farm %d: virtual=$%s debt=$%s net=$%s",
            user,
            farm_index,
            valuation.virtual_value,
            valuation.debt_value,
            valuation.net_value,
        )
        return valuation

    async def value_pair(
        self,
        user_address: Pubkey | str,
        pair_name: str,
        *,
        prices: Mapping[str, Decimal] | None = None,
        require_borrow: bool = True,
    ) -> PositionValuation:
        """Value a position by pair name, resolving accounts from config."""
        pool = self._config.pools.get(pair_name)
        if pool is None:
            raise KeyError(f"Unknown {self.protocol_name} pair '{pair_name}'")

        kind = PoolVaultKind.RAYDIUM if pool.vault_kind == "raydium" else PoolVaultKind.ORCA
        return await self.compute_position_value(
            user_address,
            pool.farm_index,
            kind,
            pool.vault,
            pool_accounts_from_config(pool),
            amm_accounts_from_config(pool),
            prices=prices,
            require_borrow=require_borrow,
        )
