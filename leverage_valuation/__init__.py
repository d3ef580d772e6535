"""Point-in-time USD valuation of leveraged LP farm positions."""
from .models import PoolVaultKind, PositionValuation

__version__ = "0.1.0"

__all__ = ["PoolVaultKind", "PositionValuation", "__version__"]
