"""
Агрегация сырых строк по дням

Строки приходят на уровне объявления (одна строка = одна сущность за день).
Для графиков и итогов нужна одна запись на календарный день.
Производные метрики пересчитываются после суммирования: суммировать
CTR/ROAS между строками нельзя.
"""
import logging
from datetime import date, timedelta
from typing import Dict, Iterable, Iterator, List, Optional

from .exceptions import InvalidRange
from .metrics import calculate_derived_metrics
from .models import (
    ADDITIVE_FIELDS,
    DailyAggregate,
    DateRange,
    MetricValues,
    PeriodTotals,
    RawDailyRow,
)


logger = logging.getLogger(__name__)

# Максимум дней для заполнения нулями (10 лет)
MAX_DENSE_DAYS = 3660


def get_week_start(target_date: date) -> date:
    """
    Получает понедельник недели для заданной даты

    Args:
        target_date: дата

    Returns:
        Дата понедельника этой недели
    """
    # weekday(): 0 = Monday, 6 = Sunday
    days_since_monday = target_date.weekday()
    week_start = target_date - timedelta(days=days_since_monday)
    return week_start


def get_week_end(week_start: date) -> date:
    """
    Получает воскресенье недели

    Args:
        week_start: понедельник недели

    Returns:
        Дата воскресенья этой недели
    """
    return week_start + timedelta(days=6)


def iter_dates(date_range: DateRange) -> Iterator[date]:
    """Все даты диапазона по возрастанию"""
    current = date_range.since
    while current <= date_range.until:
        yield current
        current += timedelta(days=1)


def _empty_sums() -> Dict[str, float]:
    return {field: 0 for field in ADDITIVE_FIELDS}


def _build_aggregate(day: date, sums: Dict[str, float]) -> DailyAggregate:
    return DailyAggregate(date=day, **sums, **calculate_derived_metrics(sums))


def check_dense_range(date_range: DateRange) -> None:
    """Плотный ряд строится только для периодов не длиннее MAX_DENSE_DAYS"""
    if date_range.day_count > MAX_DENSE_DAYS:
        raise InvalidRange(
            f"Dense series is limited to {MAX_DENSE_DAYS} days, got {date_range.day_count}",
            date_range.since,
            date_range.until,
        )


def aggregate_daily(
    rows: Iterable[RawDailyRow],
    fill_range: Optional[DateRange] = None
) -> List[DailyAggregate]:
    """
    Сворачивает строки в одну запись на календарный день

    Суммы по каждому аддитивному полю сохраняются: сумма поля по всем
    агрегатам равна сумме по входным строкам.

    Args:
        rows: строки в любом порядке
        fill_range: если задан, дни без строк внутри диапазона
            заполняются нулевыми записями (плотный ряд для графиков)

    Returns:
        Список DailyAggregate по возрастанию даты

    Raises:
        InvalidRange: если fill_range длиннее MAX_DENSE_DAYS
    """
    if fill_range is not None:
        check_dense_range(fill_range)

    daily: Dict[date, Dict[str, float]] = {}
    rows_count = 0

    for row in rows:
        sums = daily.get(row.date)
        if sums is None:
            sums = daily[row.date] = _empty_sums()
        for field in ADDITIVE_FIELDS:
            sums[field] += getattr(row, field)
        rows_count += 1

    if fill_range is not None:
        filled = 0
        for day in iter_dates(fill_range):
            if day not in daily:
                daily[day] = _empty_sums()
                filled += 1
        if filled:
            logger.debug(f"Filled {filled} empty days in {fill_range.since} - {fill_range.until}")

    result = [_build_aggregate(day, daily[day]) for day in sorted(daily)]

    logger.debug(f"Aggregated {rows_count} rows into {len(result)} days")
    return result


def calculate_totals(aggregates: Iterable[MetricValues]) -> PeriodTotals:
    """
    Итоги периода

    Производные метрики считаются по суммам периода,
    а не усредняются из дневных значений.

    Args:
        aggregates: дневные агрегаты периода

    Returns:
        PeriodTotals
    """
    sums = _empty_sums()
    days = 0

    for aggregate in aggregates:
        for field in ADDITIVE_FIELDS:
            sums[field] += getattr(aggregate, field)
        days += 1

    return PeriodTotals(days=days, **sums, **calculate_derived_metrics(sums))
