"""
Хранилища дневных строк и постраничная выборка
"""
from .base import RowStore
from .fetcher import FetchResult, fetch_all_rows, effective_page_size
from .database_store import DatabaseRowStore
from .rest_store import RestRowStore

__all__ = [
    'RowStore',
    'FetchResult',
    'fetch_all_rows',
    'effective_page_size',
    'DatabaseRowStore',
    'RestRowStore',
    'create_row_store',
]


def create_row_store(config) -> RowStore:
    """
    Создает хранилище строк по настройке row_store.backend

    Args:
        config: объект Config

    Returns:
        DatabaseRowStore или RestRowStore
    """
    section = config.get_section("row_store")

    if section.get("backend") == "rest":
        return RestRowStore(
            base_url=str(section.get("url") or ""),
            api_key=str(section.get("api_key") or ""),
            table=section.get("table") or "ads_daily_metrics",
            timeout=section.get("timeout") or 30,
            retry_attempts=section.get("retry_attempts") or 3,
            retry_delay=section.get("retry_delay") or 2,
        )

    return DatabaseRowStore()
