"""
API routes дашборда.
"""
from . import health, periods, metrics

__all__ = ["health", "periods", "metrics"]
