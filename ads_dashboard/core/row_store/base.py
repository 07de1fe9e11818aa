"""
Интерфейс хранилища дневных строк
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from ads_dashboard.core.data_processor.models import EntityScope, RawDailyRow


class RowStore(ABC):
    """
    Источник сырых дневных строк (только чтение)

    Реализация обязана отдавать строки по возрастанию даты
    с детерминированным порядком внутри дня и не более
    max_page_size строк за запрос.
    """

    # Жесткий лимит строк на запрос
    max_page_size: int = 1000

    @abstractmethod
    async def fetch_daily_rows(
        self,
        project_id: str,
        since: date,
        until: date,
        offset: int,
        limit: int,
        entity: Optional[EntityScope] = None
    ) -> List[RawDailyRow]:
        """
        Одна страница строк проекта за [since, until]

        Raises:
            RowStoreError: при ошибке хранилища
        """

    @abstractmethod
    async def project_timezone(self, project_id: str) -> str:
        """
        Timezone проекта (например, 'America/Sao_Paulo')

        Raises:
            ProjectNotFound: если проекта нет
        """

    @abstractmethod
    async def project_currency(self, project_id: str) -> str:
        """ISO код валюты проекта (только для форматирования)"""

    async def close(self) -> None:
        """Освобождает ресурсы (соединения)"""
        return None
