"""Unit tests for the config-backed asset catalog."""
from __future__ import annotations

import pytest

from account_data import RAY_FEED, RAY_MINT, USDC_RESERVE, USDC_FEED, key
from leverage_valuation.catalog import ConfigAssetCatalog
from leverage_valuation.config import AssetConfig
from leverage_valuation.errors import UnknownAsset


@pytest.fixture()
def catalog(sample_assets: dict[str, AssetConfig]) -> ConfigAssetCatalog:
    return ConfigAssetCatalog(sample_assets)


class TestConfigAssetCatalog:
    def test_by_mint_pubkey(self, catalog: ConfigAssetCatalog) -> None:
        info = catalog.by_mint_address(RAY_MINT)
        assert info.name == "RAY"
        assert info.asset_id == RAY_FEED

    def test_by_mint_string(self, catalog: ConfigAssetCatalog) -> None:
        assert catalog.by_mint_address(str(RAY_MINT)).name == "RAY"

    def test_by_account(self, catalog: ConfigAssetCatalog) -> None:
        info = catalog.by_account_address(USDC_RESERVE)
        assert info.name == "USDC"
        assert info.asset_id == USDC_FEED

    def test_unknown_mint(self, catalog: ConfigAssetCatalog) -> None:
        with pytest.raises(UnknownAsset, match="mint"):
            catalog.by_mint_address(key(200))

    def test_unknown_account(self, catalog: ConfigAssetCatalog) -> None:
        with pytest.raises(UnknownAsset) as exc:
            catalog.by_account_address(key(201))
        assert exc.value.kind == "account"

    def test_name_defaults_to_key(self) -> None:
        catalog = ConfigAssetCatalog({"SOL": AssetConfig(mint=str(key(50)), price_feed="f")})
        assert catalog.by_mint_address(key(50)).name == "SOL"
