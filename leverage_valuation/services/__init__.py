"""Service modules"""
from .valuation_service import ValuationService, format_valuation

__all__ = ["ValuationService", "format_valuation"]
