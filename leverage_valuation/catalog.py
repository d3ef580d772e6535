"""Config-backed asset catalog: mint and reserve-account lookups."""
from __future__ import annotations

from typing import Mapping

from solders.pubkey import Pubkey

from .config import AssetConfig
from .errors import UnknownAsset
from .models import AssetInfo


class ConfigAssetCatalog:
    """Resolve token mints and lending reserve accounts to priced assets."""

    def __init__(self, assets: Mapping[str, AssetConfig]) -> None:
        self._by_mint: dict[str, AssetInfo] = {}
        self._by_account: dict[str, AssetInfo] = {}
        for key, asset in assets.items():
            info = AssetInfo(asset_id=asset.price_feed, name=asset.name or key)
            if asset.mint:
                self._by_mint[asset.mint] = info
            for account in asset.accounts:
                self._by_account[account] = info

    def by_mint_address(self, mint: Pubkey | str) -> AssetInfo:
        info = self._by_mint.get(str(mint))
        if info is None:
            raise UnknownAsset(mint, "mint")
        return info

    def by_account_address(self, account: Pubkey | str) -> AssetInfo:
        info = self._by_account.get(str(account))
        if info is None:
            raise UnknownAsset(account, "account")
        return info
