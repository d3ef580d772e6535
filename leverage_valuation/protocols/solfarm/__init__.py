from .adapter import SolFarmAdapter

__all__ = ["SolFarmAdapter"]
