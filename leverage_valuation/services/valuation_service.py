"""Valuation orchestration — wires config into clients and adapters."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ..catalog import ConfigAssetCatalog
from ..chains.solana import SolanaClient
from ..config import AppConfig
from ..errors import ValuationError
from ..interfaces.price_oracle import PriceOracle
from ..models import PositionValuation
from ..oracles import PythOracle
from ..protocols.solfarm import SolFarmAdapter

logger = logging.getLogger(__name__)

# Registry of protocol adapter factories keyed by protocol name.
_PROTOCOL_FACTORIES: dict[str, Any] = {
    "solfarm": lambda client, oracle, catalog, cfg: SolFarmAdapter(
        client, oracle, catalog, cfg
    ),
}


def format_valuation(valuation: PositionValuation) -> str:
    """Render a valuation rounded to cents."""
    usd = valuation.as_usd()
    borrowed = (
        f"{valuation.borrowed_amount:,.6f} {usd.borrowed_asset}"
        if usd.borrowed_asset
        else "none"
    )
    return (
        f"Virtual value: ${usd.virtual_value:,.2f}\n"
        f"Borrowed: {borrowed}\n"
        f"Debt value: ${usd.debt_value:,.2f}\n"
        f"Net value: ${usd.net_value:,.2f}"
    )


class ValuationService:
    """Value configured wallets' leveraged positions across protocols."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config

        self._chain_clients: dict[str, SolanaClient] = {}
        for chain_name, chain_cfg in config.chains.items():
            self._chain_clients[chain_name] = SolanaClient(chain_cfg)

        self._oracle: PriceOracle = PythOracle(config.price_oracle.pyth)
        self._catalog = ConfigAssetCatalog(config.assets)

        self._adapters: dict[str, SolFarmAdapter] = {}
        for proto_name, proto_cfg in config.protocols.items():
            factory = _PROTOCOL_FACTORIES.get(proto_name)
            if factory:
                self._adapters[proto_name] = factory(
                    self._chain_clients[proto_cfg.chain],
                    self._oracle,
                    self._catalog,
                    proto_cfg,
                )
            else:
                logger.warning("No adapter factory for protocol '%s'", proto_name)

    @staticmethod
    def _format_wallet(address: str) -> str:
        if len(address) > 16:
            return f"{address[:6]}...{address[-6:]}"
        return address

    @staticmethod
    def _now_str() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

    def _adapter(self, protocol: str) -> SolFarmAdapter:
        adapter = self._adapters.get(protocol)
        if adapter is None:
            raise KeyError(f"No adapter configured for protocol '{protocol}'")
        return adapter

    async def value(
        self,
        wallet_address: str,
        pair: str,
        protocol: str = "solfarm",
        require_borrow: bool = True,
    ) -> PositionValuation:
        """Value one wallet's position in one pair."""
        return await self._adapter(protocol).value_pair(
            wallet_address, pair, require_borrow=require_borrow
        )

    async def generate_report(self) -> str:
        """Value every configured wallet × pair into a plain-text report.

        A failing pair is reported inline; the rest of the report still runs.
        """
        sections: list[str] = []

        for wallet_cfg in self._config.wallets:
            lines: list[str] = []
            for pair in wallet_cfg.pairs:
                try:
                    valuation = await self.value(
                        wallet_cfg.address, pair, wallet_cfg.protocol
                    )
                except ValuationError as e:
                    logger.error("Valuation failed for %s %s: %s", wallet_cfg.label, pair, e)
                    lines.append(f"{pair} · error: {e}")
                    continue
                lines.append(f"{pair}\n" + format_valuation(valuation))

            if lines:
                header = (
                    f"━━ {wallet_cfg.label} "
                    f"({self._format_wallet(wallet_cfg.address)}) ━━"
                )
                sections.append(header + "\n\n" + "\n\n".join(lines))

        body = "\n\n".join(sections) if sections else "No positions configured."
        return f"Leveraged Position Report\n\n{body}\n\n{self._now_str()} UTC"
