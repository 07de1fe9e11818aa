"""
Хранилище строк на SQLAlchemy (локальная БД)

Запросы синхронные, поэтому выполняются в отдельном потоке,
чтобы параллельные выборки текущего и предыдущего периода
не блокировали event loop.
"""
import asyncio
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ads_dashboard.core.data_processor.exceptions import ProjectNotFound, RowStoreError
from ads_dashboard.core.data_processor.models import EntityScope, RawDailyRow
from ads_dashboard.storage.database import AdsDailyMetric, Project, session_scope

from .base import RowStore


logger = logging.getLogger(__name__)


class DatabaseRowStore(RowStore):
    """
    Читает ads_daily_metrics из БД

    Использование:
        store = DatabaseRowStore()
        rows = await store.fetch_daily_rows('p1', since, until, 0, 1000)
    """

    max_page_size = 1000

    def __init__(self, session_factory=None, max_page_size: Optional[int] = None):
        """
        Args:
            session_factory: фабрика сессий (по умолчанию - глобальная)
            max_page_size: лимит строк на запрос
        """
        self.session_factory = session_factory
        if max_page_size is not None:
            self.max_page_size = max_page_size

    def _query_rows(
        self,
        project_id: str,
        since: date,
        until: date,
        offset: int,
        limit: int,
        entity: Optional[EntityScope]
    ) -> List[RawDailyRow]:
        limit = min(limit, self.max_page_size)

        try:
            with session_scope(self.session_factory) as session:
                query = session.query(AdsDailyMetric).filter(
                    AdsDailyMetric.project_id == project_id,
                    AdsDailyMetric.date >= since,
                    AdsDailyMetric.date <= until
                )

                if entity is not None:
                    query = query.filter(getattr(AdsDailyMetric, entity.column) == entity.entity_id)

                # id как второй ключ - стабильный порядок между страницами
                records = query.order_by(
                    AdsDailyMetric.date.asc(),
                    AdsDailyMetric.id.asc()
                ).offset(offset).limit(limit).all()

                return [RawDailyRow(**record.to_dict()) for record in records]

        except SQLAlchemyError as e:
            raise RowStoreError(f"Database query failed for project {project_id}: {e}") from e

    def _get_project(self, project_id: str) -> dict:
        try:
            with session_scope(self.session_factory) as session:
                project = session.get(Project, project_id)
                data = project.to_dict() if project is not None else None

        except SQLAlchemyError as e:
            raise RowStoreError(f"Database query failed for project {project_id}: {e}") from e

        if data is None:
            raise ProjectNotFound(project_id)
        return data

    async def fetch_daily_rows(
        self,
        project_id: str,
        since: date,
        until: date,
        offset: int,
        limit: int,
        entity: Optional[EntityScope] = None
    ) -> List[RawDailyRow]:
        rows = await asyncio.to_thread(self._query_rows, project_id, since, until, offset, limit, entity)
        logger.debug(f"DB page for {project_id}: offset={offset}, limit={limit}, rows={len(rows)}")
        return rows

    async def project_timezone(self, project_id: str) -> str:
        project = await asyncio.to_thread(self._get_project, project_id)
        return project['timezone']

    async def project_currency(self, project_id: str) -> str:
        project = await asyncio.to_thread(self._get_project, project_id)
        return project['currency']
