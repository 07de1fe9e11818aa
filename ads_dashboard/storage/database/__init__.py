"""
Модуль для работы с базой данных
"""
from .base import (
    Base,
    build_engine,
    get_engine,
    get_session_factory,
    session_scope,
    create_tables,
    drop_tables
)
from .models import (
    Project,
    AdsDailyMetric
)

__all__ = [
    # Base
    'Base',
    'build_engine',
    'get_engine',
    'get_session_factory',
    'session_scope',
    'create_tables',
    'drop_tables',
    # Models
    'Project',
    'AdsDailyMetric',
]
