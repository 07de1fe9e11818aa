"""
Сравнение периодов и вычисление изменений
"""
import logging
from typing import Dict, Iterable, Optional, Sequence

from .aggregator import calculate_totals
from .models import (
    DailyAggregate,
    DateRange,
    FieldChange,
    MetricValues,
    PeriodComparison,
    PeriodTotals,
    ResolvedPeriod,
)


logger = logging.getLogger(__name__)


# Метрика в ответе -> поле агрегата
COMPARED_METRICS = {
    'spend': 'spend',
    'impressions': 'impressions',
    'clicks': 'clicks',
    'reach': 'reach',
    'conversions': 'conversions',
    'revenue': 'conversion_value',
    'messaging_replies': 'messaging_replies',
    'profile_visits': 'profile_visits',
    'ctr': 'ctr',
    'cpm': 'cpm',
    'cpc': 'cpc',
    'roas': 'roas',
    'cpa': 'cpa',
}

# Метрики стоимости: рост - это ухудшение
INVERSE_METRICS = frozenset({'cpm', 'cpc', 'cpa'})


def calculate_change(current: float, previous: float) -> float:
    """
    Процентное изменение относительно предыдущего периода

    Если предыдущее значение 0: рост до положительного = 100%, иначе 0%.

    Args:
        current: значение текущего периода
        previous: значение предыдущего периода

    Returns:
        Изменение в процентах
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def _field_change(metric: str, current: float, previous: float) -> FieldChange:
    absolute = current - previous
    trend = 'up' if absolute > 0 else ('down' if absolute < 0 else 'stable')

    if trend == 'stable':
        favorable = None
    elif metric in INVERSE_METRICS:
        favorable = trend == 'down'
    else:
        favorable = trend == 'up'

    return FieldChange(
        current=current,
        previous=previous,
        absolute=absolute,
        percent=calculate_change(current, previous),
        trend=trend,
        favorable=favorable,
    )


def calculate_changes(
    current: MetricValues,
    previous: MetricValues
) -> Dict[str, FieldChange]:
    """
    Вычисляет изменения между итогами двух периодов

    Args:
        current: итоги текущего периода
        previous: итоги предыдущего периода

    Returns:
        Словарь метрика -> FieldChange
    """
    changes = {}

    for metric, field in COMPARED_METRICS.items():
        changes[metric] = _field_change(
            metric,
            float(getattr(current, field)),
            float(getattr(previous, field)),
        )

    return changes


def build_comparison(
    current: Sequence[DailyAggregate],
    previous: Optional[Sequence[DailyAggregate]] = None,
    *,
    current_totals: Optional[PeriodTotals] = None,
    previous_totals: Optional[PeriodTotals] = None,
    current_period: Optional[ResolvedPeriod] = None,
    previous_period: Optional[DateRange] = None,
    currency: Optional[str] = None,
    fetch_errors: Iterable[str] = (),
    is_empty: Optional[bool] = None
) -> PeriodComparison:
    """
    Собирает сравнение текущего и предыдущего периодов

    Если предыдущего периода нет (previous is None), поля изменений
    не заполняются: потребитель отличает "без изменений" от
    "сравнивать не с чем". Входные данные не мутируются.

    Args:
        current: дневные агрегаты текущего периода
        previous: дневные агрегаты предыдущего периода или None
        current_totals: итоги текущего периода (считаются, если не переданы)
        previous_totals: итоги предыдущего периода (считаются, если не переданы)
        current_period: резолвнутый текущий период
        previous_period: границы предыдущего периода
        currency: валюта проекта для форматирования
        fetch_errors: сообщения о неполной выборке
        is_empty: в периоде не найдено ни одной строки
            (по умолчанию - нет дневных агрегатов)

    Returns:
        PeriodComparison
    """
    current = tuple(current)
    if current_totals is None:
        current_totals = calculate_totals(current)

    changes = None
    details = None
    previous_days = ()

    if previous is not None:
        previous_days = tuple(previous)
        if previous_totals is None:
            previous_totals = calculate_totals(previous_days)
        details = calculate_changes(current_totals, previous_totals)
        changes = {metric: change.percent for metric, change in details.items()}
    else:
        previous_totals = None

    fetch_errors = tuple(fetch_errors)

    comparison = PeriodComparison(
        current=current,
        previous=previous_days,
        current_totals=current_totals,
        previous_totals=previous_totals,
        changes=changes,
        details=details,
        current_period=current_period,
        previous_period=previous_period,
        currency=currency,
        complete=not fetch_errors,
        fetch_errors=fetch_errors,
        is_empty=(not current) if is_empty is None else is_empty,
    )

    if changes is not None:
        logger.debug(
            f"Comparison built: {len(current)} days vs {len(previous_days)} days, "
            f"spend change {changes['spend']:.1f}%"
        )
    else:
        logger.debug(f"Comparison built: {len(current)} days, no previous period")

    return comparison
