"""
HTTP хранилище строк (PostgREST-совместимый API)

Таблица читается через REST: фильтры в query string,
пагинация через offset/limit, лимит 1000 строк на запрос.
"""
import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ads_dashboard.core.data_processor.exceptions import ProjectNotFound, RowStoreError
from ads_dashboard.core.data_processor.models import ADDITIVE_FIELDS, EntityScope, RawDailyRow

from .base import RowStore


logger = logging.getLogger(__name__)

# Колонки сущностей в REST таблице
REST_ENTITY_COLUMNS = {
    'campaign': 'campaign_id',
    'ad_set': 'adset_id',
    'ad': 'ad_id',
}

ROW_COLUMNS = ('date', 'campaign_id', 'adset_id', 'ad_id') + ADDITIVE_FIELDS


class RestRowStore(RowStore):
    """
    Клиент REST хранилища строк

    Использование:
        store = RestRowStore(base_url, api_key)
        rows = await store.fetch_daily_rows('p1', since, until, 0, 1000)
        await store.close()
    """

    max_page_size = 1000

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = 'ads_daily_metrics',
        projects_table: str = 'projects',
        timeout: float = 30,
        retry_attempts: int = 3,
        retry_delay: float = 2,
        rate_limit_delay: float = 60,
        client: Optional[httpx.AsyncClient] = None
    ):
        """Инициализация клиента"""
        if not api_key:
            raise ValueError("Row store API key is required but not configured (ROW_STORE_API_KEY)")
        if not base_url:
            raise ValueError("Row store URL is required but not configured (ROW_STORE_URL)")

        # Убираем trailing slash
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.table = table
        self.projects_table = projects_table
        self.timeout = timeout
        self.retry_attempts = max(1, int(retry_attempts))
        self.retry_delay = retry_delay
        self.rate_limit_delay = rate_limit_delay

        self._client = client
        self._owns_client = client is None

        logger.info(f"RestRowStore initialized: {self.base_url} (table: {self.table})")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _headers(self) -> Dict[str, str]:
        return {
            'apikey': self.api_key,
            'Authorization': f'Bearer {self.api_key}',
            'Accept': 'application/json',
        }

    async def _request(self, path: str, params: List[Tuple[str, Any]]) -> List[Dict[str, Any]]:
        """
        Выполняет GET запрос с retry механизмом

        Args:
            path: путь относительно /rest/v1
            params: параметры запроса (ключи могут повторяться)

        Returns:
            Список записей

        Raises:
            RowStoreError: если все попытки неудачны или ответ невалиден
        """
        url = f"{self.base_url}/rest/v1/{path}"
        client = self._get_client()
        last_error: Optional[Exception] = None

        for attempt in range(self.retry_attempts):
            try:
                logger.debug(f"Request attempt {attempt + 1}/{self.retry_attempts}: {path}")

                response = await client.get(url, params=params, headers=self._headers())
                response.raise_for_status()

                try:
                    data = response.json()
                except ValueError as json_err:
                    logger.error(f"JSON parse error: {json_err}")
                    logger.error(f"Response text: {response.text[:500]}")
                    raise RowStoreError(f"Invalid JSON from row store: {json_err}") from json_err

                if not isinstance(data, list):
                    logger.error(f"Unexpected response type: {type(data).__name__}")
                    raise RowStoreError(f"Unexpected response from row store: {str(data)[:200]}")

                logger.debug(f"Request successful: {len(data)} items")
                return data

            except httpx.TimeoutException as e:
                last_error = e
                logger.warning(f"Timeout on attempt {attempt + 1}: {e}")
                if attempt < self.retry_attempts - 1:
                    await asyncio.sleep(self.retry_delay * (attempt + 1))

            except httpx.HTTPStatusError as e:
                last_error = e
                status_code = e.response.status_code

                # Специальная обработка Rate Limiting (429)
                if status_code == 429:
                    logger.warning(f"Rate limit exceeded (429) on attempt {attempt + 1}")
                    if attempt < self.retry_attempts - 1:
                        logger.info(f"Waiting {self.rate_limit_delay} seconds before retry due to rate limiting...")
                        await asyncio.sleep(self.rate_limit_delay)
                        continue
                    break

                logger.error(f"HTTP error {status_code}: {e}")

                # Повторяем при серверных ошибках (5xx)
                if status_code >= 500 and attempt < self.retry_attempts - 1:
                    await asyncio.sleep(self.retry_delay * (attempt + 1))
                elif status_code < 500:
                    raise RowStoreError(f"Row store rejected request ({status_code}): {e}") from e

            except httpx.RequestError as e:
                last_error = e
                logger.error(f"Request error: {e}")
                if attempt < self.retry_attempts - 1:
                    await asyncio.sleep(self.retry_delay * (attempt + 1))

        logger.error(f"All {self.retry_attempts} attempts failed for {url}")
        raise RowStoreError(f"Row store request failed after {self.retry_attempts} attempts: {last_error}")

    @staticmethod
    def _to_row(item: Dict[str, Any]) -> RawDailyRow:
        data = dict(item)
        if 'adset_id' in data and 'ad_set_id' not in data:
            data['ad_set_id'] = data.pop('adset_id')
        return RawDailyRow(**data)

    async def fetch_daily_rows(
        self,
        project_id: str,
        since: date,
        until: date,
        offset: int,
        limit: int,
        entity: Optional[EntityScope] = None
    ) -> List[RawDailyRow]:
        limit = min(limit, self.max_page_size)

        params: List[Tuple[str, Any]] = [
            ('select', ','.join(ROW_COLUMNS)),
            ('project_id', f'eq.{project_id}'),
            ('date', f'gte.{since.isoformat()}'),
            ('date', f'lte.{until.isoformat()}'),
        ]
        if entity is not None:
            params.append((REST_ENTITY_COLUMNS[entity.level], f'eq.{entity.entity_id}'))
        params.extend([
            ('order', 'date.asc,id.asc'),
            ('offset', offset),
            ('limit', limit),
        ])

        data = await self._request(self.table, params)

        try:
            return [self._to_row(item) for item in data]
        except ValueError as e:
            raise RowStoreError(f"Invalid row from row store: {e}") from e

    async def _get_project(self, project_id: str) -> Dict[str, Any]:
        data = await self._request(self.projects_table, [
            ('select', 'id,timezone,currency'),
            ('id', f'eq.{project_id}'),
            ('limit', 1),
        ])
        if not data:
            raise ProjectNotFound(project_id)
        return data[0]

    async def project_timezone(self, project_id: str) -> str:
        project = await self._get_project(project_id)
        return project.get('timezone') or 'America/Sao_Paulo'

    async def project_currency(self, project_id: str) -> str:
        project = await self._get_project(project_id)
        return project.get('currency') or 'BRL'

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
