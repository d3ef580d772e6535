"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

VAULT_KINDS = ("raydium", "orca")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30
    commitment: str = "confirmed"


@dataclass(frozen=True)
class PoolConfig:
    """Accounts of one leveraged farm pair (e.g. ``RAY-USDC``)."""

    vault_kind: str = "raydium"
    farm_index: int = 0
    vault: str = ""
    lp_mint: str = ""
    pool_coin_token_account: str = ""
    pool_pc_token_account: str = ""
    base_mint: str = ""
    quote_mint: str = ""
    amm_id: str = ""
    amm_open_orders: str = ""


@dataclass(frozen=True)
class ProtocolConfig:
    chain: str = ""
    program_id: str = ""
    lp_unit: int = 10**6
    wad_unit: int = 10**18
    obligation_slots: int = 3
    pools: dict[str, PoolConfig] = field(default_factory=dict)


@dataclass(frozen=True)
class AssetConfig:
    name: str = ""
    mint: str = ""
    price_feed: str = ""
    accounts: tuple[str, ...] = ()


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    timeout: int = 10


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "pyth"
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class WalletConfig:
    label: str = ""
    address: str = ""
    protocol: str = "solfarm"
    pairs: tuple[str, ...] = ()


@dataclass(frozen=True)
class AppConfig:
    chains: dict[str, ChainConfig] = field(default_factory=dict)
    protocols: dict[str, ProtocolConfig] = field(default_factory=dict)
    assets: dict[str, AssetConfig] = field(default_factory=dict)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    wallets: tuple[WalletConfig, ...] = ()


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_chains(raw: dict[str, Any]) -> dict[str, ChainConfig]:
    chains: dict[str, ChainConfig] = {}
    for name, cfg in raw.items():
        chains[name] = ChainConfig(
            rpc_endpoints=tuple(cfg.get("rpc_endpoints", [])),
            rpc_timeout=int(cfg.get("rpc_timeout", 30)),
            commitment=cfg.get("commitment", "confirmed"),
        )
    return chains


def _build_pools(raw: dict[str, Any]) -> dict[str, PoolConfig]:
    pools: dict[str, PoolConfig] = {}
    for pair, cfg in raw.items():
        pools[pair] = PoolConfig(
            vault_kind=str(cfg.get("vault_kind", "raydium")).lower(),
            farm_index=int(cfg.get("farm_index", 0)),
            vault=cfg.get("vault", ""),
            lp_mint=cfg.get("lp_mint", ""),
            pool_coin_token_account=cfg.get("pool_coin_token_account", ""),
            pool_pc_token_account=cfg.get("pool_pc_token_account", ""),
            base_mint=cfg.get("base_mint", ""),
            quote_mint=cfg.get("quote_mint", ""),
            amm_id=cfg.get("amm_id", ""),
            amm_open_orders=cfg.get("amm_open_orders", ""),
        )
    return pools


def _build_protocols(raw: dict[str, Any]) -> dict[str, ProtocolConfig]:
    protocols: dict[str, ProtocolConfig] = {}
    for name, cfg in raw.items():
        protocols[name] = ProtocolConfig(
            chain=cfg.get("chain", ""),
            program_id=cfg.get("program_id", ""),
            lp_unit=int(cfg.get("lp_unit", 10**6)),
            wad_unit=int(cfg.get("wad_unit", 10**18)),
            obligation_slots=int(cfg.get("obligation_slots", 3)),
            pools=_build_pools(cfg.get("pools", {})),
        )
    return protocols


def _build_assets(raw: dict[str, Any]) -> dict[str, AssetConfig]:
    assets: dict[str, AssetConfig] = {}
    for name, cfg in raw.items():
        assets[name] = AssetConfig(
            name=cfg.get("name", name),
            mint=cfg.get("mint", ""),
            price_feed=cfg.get("price_feed", ""),
            accounts=tuple(cfg.get("accounts", [])),
        )
    return assets


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    return PriceOracleConfig(
        provider=raw.get("provider", "pyth"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            timeout=int(pyth_raw.get("timeout", PythConfig.timeout)),
        ),
    )


def _build_wallets(raw: list[dict[str, Any]]) -> tuple[WalletConfig, ...]:
    wallets: list[WalletConfig] = []
    for w in raw:
        wallets.append(
            WalletConfig(
                label=w.get("label", ""),
                address=w.get("address", ""),
                protocol=w.get("protocol", "solfarm"),
                pairs=tuple(w.get("pairs", [])),
            )
        )
    return tuple(wallets)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        chains=_build_chains(raw.get("chains", {})),
        protocols=_build_protocols(raw.get("protocols", {})),
        assets=_build_assets(raw.get("assets", {})),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
        wallets=_build_wallets(raw.get("wallets", [])),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.protocols:
        raise ValueError("At least one protocol must be configured")

    for name, asset in cfg.assets.items():
        if not asset.price_feed:
            raise ValueError(f"Asset '{name}' has no price_feed")

    mints = {asset.mint for asset in cfg.assets.values() if asset.mint}

    for name, proto in cfg.protocols.items():
        if proto.chain not in cfg.chains:
            raise ValueError(f"Protocol '{name}' references unknown chain '{proto.chain}'")
        if not proto.program_id:
            raise ValueError(f"Protocol '{name}' has no program_id")
        if proto.lp_unit <= 0 or proto.wad_unit <= 0:
            raise ValueError(f"Protocol '{name}' units must be positive")
        if not 1 <= proto.obligation_slots <= 256:
            raise ValueError(f"Protocol '{name}' obligation_slots must be in 1..256")
        for pair, pool in proto.pools.items():
            if pool.vault_kind not in VAULT_KINDS:
                raise ValueError(
                    f"Pool '{pair}' has unknown vault_kind '{pool.vault_kind}'"
                )
            for mint in (pool.base_mint, pool.quote_mint):
                if mint not in mints:
                    raise ValueError(f"Pool '{pair}' references unknown mint '{mint}'")

    for wallet in cfg.wallets:
        if not wallet.address:
            raise ValueError(f"Wallet '{wallet.label}' has no address")
        proto = cfg.protocols.get(wallet.protocol)
        if proto is None:
            raise ValueError(
                f"Wallet '{wallet.label}' references unknown protocol '{wallet.protocol}'"
            )
        for pair in wallet.pairs:
            if pair not in proto.pools:
                raise ValueError(
                    f"Wallet '{wallet.label}' references unknown pair '{pair}'"
                )
