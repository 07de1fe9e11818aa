"""
Постраничная выборка строк

Хранилище отдает не больше max_page_size строк за запрос,
поэтому строки периода забираются страницами: offset растет на
размер страницы, пока страница не придет неполной.
Страницы запрашиваются строго последовательно.
"""
import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ads_dashboard.core.data_processor.context import DEFAULT_CONTEXT, EngineContext
from ads_dashboard.core.data_processor.exceptions import FetchFailure, PaginationLimitExceeded
from ads_dashboard.core.data_processor.models import DateRange, EntityScope, RawDailyRow

from .base import RowStore


logger = logging.getLogger(__name__)


class FetchResult(BaseModel):
    """Результат выборки: строки + признак полноты"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    rows: List[RawDailyRow]
    pages: int
    complete: bool = True
    error: Optional[FetchFailure] = None


def effective_page_size(store: RowStore, context: EngineContext) -> int:
    """Размер страницы: не больше лимита хранилища"""
    store_cap = getattr(store, 'max_page_size', None) or context.page_size
    return min(context.page_size, store_cap)


async def fetch_all_rows(
    store: RowStore,
    project_id: str,
    date_range: DateRange,
    *,
    context: Optional[EngineContext] = None,
    entity: Optional[EntityScope] = None
) -> FetchResult:
    """
    Забирает все строки проекта за период

    Ошибка хранилища посреди пагинации не пробрасывается: возвращаются
    уже собранные строки с complete=False и FetchFailure в error.

    Args:
        store: хранилище строк
        project_id: ID проекта
        date_range: период
        context: контекст движка (размер страницы, лимит страниц)
        entity: фильтр по кампании/группе/объявлению

    Returns:
        FetchResult

    Raises:
        PaginationLimitExceeded: если страниц больше context.max_pages
    """
    context = context or DEFAULT_CONTEXT
    page_size = effective_page_size(store, context)

    rows: List[RawDailyRow] = []
    pages = 0
    offset = 0

    while True:
        # После последней разрешенной страницы только проверяем, есть ли еще строки
        limit_reached = pages >= context.max_pages

        try:
            page = await store.fetch_daily_rows(
                project_id,
                date_range.since,
                date_range.until,
                offset,
                1 if limit_reached else page_size,
                entity,
            )
        except Exception as e:
            failure = FetchFailure(
                project_id,
                date_range.since,
                date_range.until,
                offset,
                len(rows),
                cause=e,
            )
            logger.error(f"{failure}")
            logger.warning(f"Returning partial data for project {project_id}: {len(rows)} rows")
            return FetchResult(rows=rows, pages=pages, complete=False, error=failure)

        if limit_reached:
            if page:
                logger.error(
                    f"Pagination limit reached for project {project_id} "
                    f"({date_range.since} - {date_range.until}): {pages} pages, {len(rows)} rows"
                )
                raise PaginationLimitExceeded(project_id, context.max_pages, len(rows))
            break

        pages += 1
        rows.extend(page)

        logger.debug(f"Page {pages} for project {project_id}: {len(page)} rows (offset {offset})")

        # Неполная (или пустая) страница - данных больше нет
        if len(page) < page_size:
            break

        offset += page_size

    logger.info(
        f"Fetched {len(rows)} rows for project {project_id} "
        f"({date_range.since} - {date_range.until}) in {pages} pages"
    )
    return FetchResult(rows=rows, pages=pages, complete=True)
