"""
Прикладные сервисы дашборда
"""
from .comparison_service import LatestRequestGuard, load_comparison

__all__ = ['LatestRequestGuard', 'load_comparison']
