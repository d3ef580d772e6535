"""Collaborator protocols for the position valuation pipeline."""
from .asset_catalog import AssetCatalog
from .ledger import LedgerReader
from .price_oracle import PriceOracle

__all__ = ["AssetCatalog", "LedgerReader", "PriceOracle"]
