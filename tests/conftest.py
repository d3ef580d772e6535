"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from decimal import Decimal
from pathlib import Path

import pytest

from account_data import (
    AMM_ID,
    AMM_OPEN_ORDERS,
    COIN_ACCOUNT,
    LP_MINT,
    PC_ACCOUNT,
    PROGRAM_ID,
    RAY_FEED,
    RAY_MINT,
    RAY_RESERVE,
    USDC_FEED,
    USDC_MINT,
    USDC_RESERVE,
    USER,
    VAULT,
    key,
)
from leverage_valuation.config import (
    AppConfig,
    AssetConfig,
    ChainConfig,
    PoolConfig,
    PriceOracleConfig,
    ProtocolConfig,
    PythConfig,
    WalletConfig,
)
from leverage_valuation.models import (
    BorrowLeg,
    ObligationRecord,
    PoolSnapshot,
    PositionValuation,
    VaultState,
)

# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
    )


@pytest.fixture()
def sample_pool_config() -> PoolConfig:
    return PoolConfig(
        vault_kind="raydium",
        farm_index=4,
        vault=str(VAULT),
        lp_mint=str(LP_MINT),
        pool_coin_token_account=str(COIN_ACCOUNT),
        pool_pc_token_account=str(PC_ACCOUNT),
        base_mint=str(RAY_MINT),
        quote_mint=str(USDC_MINT),
        amm_id=str(AMM_ID),
        amm_open_orders=str(AMM_OPEN_ORDERS),
    )


@pytest.fixture()
def sample_protocol_config(sample_pool_config: PoolConfig) -> ProtocolConfig:
    return ProtocolConfig(
        chain="solana",
        program_id=str(PROGRAM_ID),
        lp_unit=10**6,
        wad_unit=10**18,
        obligation_slots=3,
        pools={"RAY-USDC": sample_pool_config},
    )


@pytest.fixture()
def sample_assets() -> dict[str, AssetConfig]:
    return {
        "RAY": AssetConfig(
            name="RAY", mint=str(RAY_MINT), price_feed=RAY_FEED, accounts=(str(RAY_RESERVE),)
        ),
        "USDC": AssetConfig(
            name="USDC",
            mint=str(USDC_MINT),
            price_feed=USDC_FEED,
            accounts=(str(USDC_RESERVE),),
        ),
    }


@pytest.fixture()
def sample_app_config(
    sample_chain_config: ChainConfig,
    sample_protocol_config: ProtocolConfig,
    sample_assets: dict[str, AssetConfig],
) -> AppConfig:
    return AppConfig(
        chains={"solana": sample_chain_config},
        protocols={"solfarm": sample_protocol_config},
        assets=sample_assets,
        price_oracle=PriceOracleConfig(
            provider="pyth", pyth=PythConfig(hermes_url="https://hermes.example.com")
        ),
        wallets=(
            WalletConfig(
                label="test-wallet",
                address=str(USER),
                protocol="solfarm",
                pairs=("RAY-USDC",),
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_obligation() -> ObligationRecord:
    return ObligationRecord(
        vault_shares=1000,
        coin_decimals=6,
        pc_decimals=6,
        borrow_one=BorrowLeg(
            borrowed_amount_wads=5 * 10**18 * 10**6, borrow_reserve=USDC_RESERVE
        ),
        borrow_two=BorrowLeg(borrowed_amount_wads=0, borrow_reserve=key(0)),
    )


@pytest.fixture()
def sample_vault_state() -> VaultState:
    return VaultState(total_vault_balance=50_000, total_vlp_shares=10_000)


@pytest.fixture()
def sample_snapshot() -> PoolSnapshot:
    # 200 coin, 300 pc, 400 LP supply, all 6 decimals
    return PoolSnapshot(
        total_supply=400_000_000,
        supply_decimals=6,
        coin_balance=200_000_000,
        coin_decimals=6,
        pc_balance=300_000_000,
        pc_decimals=6,
    )


@pytest.fixture()
def sample_valuation() -> PositionValuation:
    return PositionValuation(
        borrowed_amount=Decimal("5"),
        virtual_value=Decimal("1234.567"),
        net_value=Decimal("1224.565"),
        debt_value=Decimal("10.002"),
        borrowed_asset="USDC",
        deposited_lp_tokens=Decimal("5000"),
        pool_tvl=Decimal("800.125"),
        unit_lp_value=Decimal("2"),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent(f"""\
    chains:
      solana:
        rpc_endpoints: ["https://rpc.example.com"]
        rpc_timeout: 10
    protocols:
      solfarm:
        chain: solana
        program_id: "{PROGRAM_ID}"
        lp_unit: 1000000
        obligation_slots: 3
        pools:
          RAY-USDC:
            vault_kind: raydium
            farm_index: 4
            vault: "{VAULT}"
            lp_mint: "{LP_MINT}"
            pool_coin_token_account: "{COIN_ACCOUNT}"
            pool_pc_token_account: "{PC_ACCOUNT}"
            base_mint: "{RAY_MINT}"
            quote_mint: "{USDC_MINT}"
            amm_id: "{AMM_ID}"
            amm_open_orders: "{AMM_OPEN_ORDERS}"
    assets:
      RAY:
        mint: "{RAY_MINT}"
        price_feed: "{RAY_FEED}"
        accounts: ["{RAY_RESERVE}"]
      USDC:
        mint: "{USDC_MINT}"
        price_feed: "{USDC_FEED}"
        accounts: ["{USDC_RESERVE}"]
    price_oracle:
      provider: pyth
      pyth:
        hermes_url: "https://hermes.example.com"
    wallets:
      - label: test-wallet
        address: "{USER}"
        protocol: solfarm
        pairs: [RAY-USDC]
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
