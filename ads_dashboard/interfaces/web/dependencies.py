"""
Зависимости для FastAPI endpoints.
"""
from typing import AsyncGenerator
import logging

from ads_dashboard.config import get_config
from ads_dashboard.core.data_processor import EngineContext
from ads_dashboard.core.row_store import RowStore, create_row_store

logger = logging.getLogger(__name__)


def get_engine_context() -> EngineContext:
    """
    Зависимость для получения контекста движка.

    Returns:
        EngineContext из текущей конфигурации
    """
    return get_config().get_engine_context()


async def get_row_store() -> AsyncGenerator[RowStore, None]:
    """
    Зависимость для получения хранилища строк.

    Yields:
        RowStore: хранилище по настройке ROW_STORE_BACKEND
    """
    store = create_row_store(get_config())
    try:
        yield store
    finally:
        await store.close()
