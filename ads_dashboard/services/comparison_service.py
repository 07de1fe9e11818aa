"""
Загрузка сравнения периодов для дашборда

Связывает резолвер периода, постраничную выборку, агрегацию и
сравнение в одну операцию. Текущий и предыдущий периоды
забираются параллельно, страницы внутри периода - последовательно.
"""
import asyncio
import itertools
import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, Hashable, Optional, TypeVar

from ads_dashboard.core.data_processor import (
    DEFAULT_CONTEXT,
    EngineContext,
    EntityScope,
    PeriodComparison,
    aggregate_daily,
    build_comparison,
    calculate_totals,
    check_dense_range,
    previous_period,
    resolve_period,
    validate_selection,
)
from ads_dashboard.core.row_store import FetchResult, RowStore, fetch_all_rows


logger = logging.getLogger(__name__)

T = TypeVar('T')


async def load_comparison(
    project_id: str,
    preset: str,
    custom_range=None,
    *,
    store: RowStore,
    context: Optional[EngineContext] = None,
    now: Optional[datetime] = None,
    entity: Optional[EntityScope] = None,
    dense: bool = False
) -> PeriodComparison:
    """
    Загружает и сравнивает текущий и предыдущий периоды проекта

    Args:
        project_id: ID проекта
        preset: ключ пресета
        custom_range: границы для 'custom'
        store: хранилище строк
        context: контекст движка
        now: момент расчета (по умолчанию - сейчас)
        entity: фильтр по кампании/группе/объявлению
        dense: заполнять дни без данных нулями

    Returns:
        PeriodComparison. При ошибке хранилища посреди пагинации -
        частичный результат с complete=False и текстом ошибки в fetch_errors.

    Raises:
        InvalidPreset, InvalidRange: до любых запросов к хранилищу
        InvalidRange: плотный ряд длиннее MAX_DENSE_DAYS (до выборки строк)
        PaginationLimitExceeded: если период не помещается в лимит страниц
        ProjectNotFound: проект отсутствует в хранилище
    """
    context = context or DEFAULT_CONTEXT

    validate_selection(preset, custom_range)

    timezone = await store.project_timezone(project_id)
    current_period = resolve_period(preset, timezone, custom_range, context=context, now=now)
    previous_range = previous_period(current_period)
    current_range = current_period.as_range()

    logger.info(
        f"Loading comparison for project {project_id}: {current_period.preset} "
        f"{current_range.since} - {current_range.until}, previous: {previous_range or 'none'}"
    )

    if dense:
        check_dense_range(current_range)
        if previous_range is not None:
            check_dense_range(previous_range)

    tasks = [
        store.project_currency(project_id),
        fetch_all_rows(store, project_id, current_range, context=context, entity=entity),
    ]
    if previous_range is not None:
        tasks.append(fetch_all_rows(store, project_id, previous_range, context=context, entity=entity))

    # Ждем все выборки: ни одна не должна работать после закрытия хранилища
    results = await asyncio.gather(*tasks, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result

    currency, current_result = results[0], results[1]
    previous_result = results[2] if previous_range is not None else None

    current_days = aggregate_daily(current_result.rows, current_range if dense else None)

    previous_days = None
    if previous_result is not None:
        previous_days = aggregate_daily(previous_result.rows, previous_range if dense else None)

    fetch_errors = [
        str(result.error)
        for result in (current_result, previous_result)
        if isinstance(result, FetchResult) and result.error is not None
    ]

    is_empty = not current_result.rows
    if is_empty:
        logger.info(f"No rows for project {project_id} in {current_range.since} - {current_range.until}")

    return build_comparison(
        current_days,
        previous_days,
        current_totals=calculate_totals(current_days),
        previous_totals=calculate_totals(previous_days) if previous_days is not None else None,
        current_period=current_period,
        previous_period=previous_range,
        currency=currency,
        fetch_errors=fetch_errors,
        is_empty=is_empty,
    )


class LatestRequestGuard:
    """
    Последний запрос побеждает

    Каждый запрос по ключу (например, проект на экране) получает
    токен; результат применяется, только если за время загрузки
    по этому ключу не начался более новый запрос.

    Использование:
        guard = LatestRequestGuard()
        result = await guard.run(project_id, lambda: load_comparison(...))
        if result is None:
            ...  # устарел, новый запрос уже в работе
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: Dict[Hashable, int] = {}

    def begin(self, key: Hashable) -> int:
        """Регистрирует новый запрос и возвращает его токен"""
        token = next(self._counter)
        self._latest[key] = token
        return token

    def is_current(self, key: Hashable, token: int) -> bool:
        return self._latest.get(key) == token

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> Optional[T]:
        """
        Выполняет запрос и отбрасывает устаревший результат

        Args:
            key: ключ выбора
            factory: функция, возвращающая корутину запроса

        Returns:
            Результат или None, если запрос устарел
        """
        token = self.begin(key)

        try:
            result = await factory()
        except Exception as e:
            if not self.is_current(key, token):
                logger.debug(f"Discarding error of stale request {token} for {key}: {e}")
                return None
            raise

        if not self.is_current(key, token):
            logger.debug(f"Discarding stale result {token} for {key}")
            return None

        return result
