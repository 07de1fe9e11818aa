"""
Расчет периодов: пресет -> календарные границы -> период для сравнения

"Сегодня" определяется в timezone проекта, все остальные пресеты
считаются от этой даты календарной арифметикой с переходом через
границы месяца и года. Стратегия сравнения определяется один раз
здесь и возвращается вместе с периодом.
"""
import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from ads_dashboard.utils import datetime_utils

from .aggregator import get_week_end, get_week_start
from .context import DEFAULT_CONTEXT, EngineContext
from .exceptions import InvalidPreset, InvalidRange
from .models import ComparisonStrategy, DateRange, ResolvedPeriod


logger = logging.getLogger(__name__)


PRESET_TODAY = 'today'
PRESET_YESTERDAY = 'yesterday'
PRESET_LAST_7D = 'last_7d'
PRESET_LAST_14D = 'last_14d'
PRESET_LAST_30D = 'last_30d'
PRESET_LAST_60D = 'last_60d'
PRESET_LAST_90D = 'last_90d'
PRESET_WEEK_CURRENT = 'week_current'
PRESET_WEEK_LAST = 'week_last'
PRESET_THIS_MONTH = 'this_month'
PRESET_LAST_MONTH = 'last_month'
PRESET_QUARTER_CURRENT = 'quarter_current'
PRESET_QUARTER_LAST = 'quarter_last'
PRESET_THIS_YEAR = 'this_year'
PRESET_LAST_YEAR = 'last_year'
PRESET_CUSTOM = 'custom'

# Последние N дней, включая сегодня
LAST_N_DAYS = {
    PRESET_LAST_7D: 7,
    PRESET_LAST_14D: 14,
    PRESET_LAST_30D: 30,
    PRESET_LAST_60D: 60,
    PRESET_LAST_90D: 90,
}

# Человекопонятные названия (порядок = порядок в селекторе периода)
PRESET_LABELS = {
    PRESET_TODAY: 'Today',
    PRESET_YESTERDAY: 'Yesterday',
    PRESET_LAST_7D: 'Last 7 days',
    PRESET_LAST_14D: 'Last 14 days',
    PRESET_LAST_30D: 'Last 30 days',
    PRESET_LAST_60D: 'Last 60 days',
    PRESET_LAST_90D: 'Last 90 days',
    PRESET_WEEK_CURRENT: 'This week',
    PRESET_WEEK_LAST: 'Last week',
    PRESET_THIS_MONTH: 'This month',
    PRESET_LAST_MONTH: 'Last month',
    PRESET_QUARTER_CURRENT: 'This quarter',
    PRESET_QUARTER_LAST: 'Last quarter',
    PRESET_THIS_YEAR: 'This year',
    PRESET_LAST_YEAR: 'Last year',
    PRESET_CUSTOM: 'Custom',
}

PRESETS = tuple(PRESET_LABELS)

DEFAULT_PRESET = PRESET_LAST_7D

# Ключи из старого селектора дат
PRESET_ALIASES = {
    'last_7_days': PRESET_LAST_7D,
    'last_14_days': PRESET_LAST_14D,
    'last_30_days': PRESET_LAST_30D,
    'last_60_days': PRESET_LAST_60D,
    'last_90_days': PRESET_LAST_90D,
    'month_current': PRESET_THIS_MONTH,
    'month_last': PRESET_LAST_MONTH,
}

# Пресеты с нестандартным сравнением; все остальные - SAME_LENGTH
PRESET_STRATEGIES = {
    PRESET_THIS_MONTH: ComparisonStrategy.PREVIOUS_CALENDAR_MONTH,
    PRESET_THIS_YEAR: ComparisonStrategy.PREVIOUS_CALENDAR_YEAR,
    # "Прошлый месяц" сравниваем с позапрошлым
    PRESET_LAST_MONTH: ComparisonStrategy.TWO_MONTHS_PRIOR,
    # Данных за позапрошлый год обычно нет
    PRESET_LAST_YEAR: ComparisonStrategy.NONE,
}

CustomRangeInput = Union[DateRange, Mapping[str, Any], Sequence[Any]]


# ---------------------------------------------------------------------------
# Календарная арифметика
# ---------------------------------------------------------------------------

def last_day_of_month(year: int, month: int) -> int:
    """Номер последнего дня месяца"""
    return calendar.monthrange(year, month)[1]


def first_day_of_month(target: date) -> date:
    return target.replace(day=1)


def end_of_month(target: date) -> date:
    return target.replace(day=last_day_of_month(target.year, target.month))


def add_months(target: date, months: int) -> date:
    """
    Сдвигает дату на N месяцев (отрицательное N - назад)

    День месяца ограничивается последним днем целевого месяца:
    31 марта - 1 месяц = 28/29 февраля.
    """
    month_index = target.year * 12 + (target.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(target.day, last_day_of_month(year, month))
    return date(year, month, day)


def shift_years(target: date, years: int) -> date:
    """Сдвигает дату на N лет; 29 февраля в невисокосный год -> 28 февраля"""
    year = target.year + years
    day = min(target.day, last_day_of_month(year, target.month))
    return date(year, target.month, day)


def first_day_of_quarter(target: date) -> date:
    quarter_month = (target.month - 1) // 3 * 3 + 1
    return date(target.year, quarter_month, 1)


def _parse_date(value: Any, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            raise InvalidRange(f"Custom range '{name}' is not a valid ISO date: {value!r}")
    raise InvalidRange(f"Custom range '{name}' must be a date, got {type(value).__name__}")


def _coerce_custom_range(custom_range: Optional[CustomRangeInput]) -> Tuple[date, date]:
    """
    Приводит произвольный период к паре дат

    Принимает DateRange, словарь с ключами from/to или since/until,
    либо пару (from, to).
    """
    if custom_range is None:
        raise InvalidRange("Custom preset requires both 'from' and 'to' dates")

    if isinstance(custom_range, DateRange):
        start, end = custom_range.since, custom_range.until
    elif isinstance(custom_range, Mapping):
        start = custom_range.get('from', custom_range.get('since'))
        end = custom_range.get('to', custom_range.get('until'))
    elif isinstance(custom_range, (list, tuple)) and len(custom_range) == 2:
        start, end = custom_range
    else:
        raise InvalidRange(f"Unsupported custom range value: {custom_range!r}")

    if start is None or end is None:
        raise InvalidRange("Custom preset requires both 'from' and 'to' dates")

    since = _parse_date(start, 'from')
    until = _parse_date(end, 'to')

    if since > until:
        raise InvalidRange(f"Custom range start {since} is after end {until}", since, until)

    # Период для сравнения той же длины должен уместиться перед началом
    if (since - date.min).days < (until - since).days + 1:
        raise InvalidRange(f"Custom range {since} - {until} has no room for a comparison period", since, until)

    return since, until


def normalize_preset(preset: str) -> str:
    """
    Приводит ключ пресета к каноническому виду

    Raises:
        InvalidPreset: если ключ неизвестен
    """
    if not isinstance(preset, str):
        raise InvalidPreset(str(preset))
    key = preset.strip().lower()
    key = PRESET_ALIASES.get(key, key)
    if key not in PRESET_LABELS:
        raise InvalidPreset(preset)
    return key


def validate_selection(preset: str, custom_range: Optional[CustomRangeInput] = None) -> str:
    """
    Проверяет пресет и произвольный период без обращения к "сегодня"

    Returns:
        Канонический ключ пресета

    Raises:
        InvalidPreset: неизвестный пресет
        InvalidRange: 'custom' без обеих границ или from > to
    """
    key = normalize_preset(preset)
    if key == PRESET_CUSTOM:
        _coerce_custom_range(custom_range)
    return key


def preset_range(preset: str, today: date) -> Tuple[date, date]:
    """
    Границы пресета относительно даты "сегодня"

    Args:
        preset: канонический ключ пресета (не custom)
        today: опорная дата

    Returns:
        (since, until)
    """
    if preset == PRESET_TODAY:
        return today, today

    if preset == PRESET_YESTERDAY:
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday

    if preset in LAST_N_DAYS:
        days = LAST_N_DAYS[preset]
        return today - timedelta(days=days - 1), today

    if preset == PRESET_WEEK_CURRENT:
        return get_week_start(today), today

    if preset == PRESET_WEEK_LAST:
        monday = get_week_start(today) - timedelta(days=7)
        return monday, get_week_end(monday)

    if preset == PRESET_THIS_MONTH:
        return first_day_of_month(today), today

    if preset == PRESET_LAST_MONTH:
        last_month = add_months(first_day_of_month(today), -1)
        return last_month, end_of_month(last_month)

    if preset == PRESET_QUARTER_CURRENT:
        return first_day_of_quarter(today), today

    if preset == PRESET_QUARTER_LAST:
        quarter_start = add_months(first_day_of_quarter(today), -3)
        return quarter_start, add_months(quarter_start, 3) - timedelta(days=1)

    if preset == PRESET_THIS_YEAR:
        return date(today.year, 1, 1), today

    if preset == PRESET_LAST_YEAR:
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)

    raise InvalidPreset(preset)


# ---------------------------------------------------------------------------
# Резолвер периода
# ---------------------------------------------------------------------------

def resolve_period(
    preset: str,
    timezone: Optional[str] = None,
    custom_range: Optional[CustomRangeInput] = None,
    *,
    context: Optional[EngineContext] = None,
    now: Optional[datetime] = None
) -> ResolvedPeriod:
    """
    Переводит пресет в календарные границы

    Args:
        preset: ключ пресета ('last_7d', 'this_month', 'custom', ...)
        timezone: timezone проекта
        custom_range: границы для 'custom' (DateRange, {'from', 'to'} или пара дат)
        context: контекст движка (таблица смещений)
        now: момент расчета (по умолчанию - сейчас)

    Returns:
        ResolvedPeriod

    Raises:
        InvalidPreset: неизвестный пресет
        InvalidRange: 'custom' без обеих границ или from > to
    """
    context = context or DEFAULT_CONTEXT
    key = normalize_preset(preset)

    # Валидируем произвольный период до любых вычислений
    if key == PRESET_CUSTOM:
        since, until = _coerce_custom_range(custom_range)

    today = datetime_utils.get_today(timezone, context, now)

    if key == PRESET_CUSTOM:
        strategy = ComparisonStrategy.SAME_LENGTH
    else:
        since, until = preset_range(key, today)
        strategy = PRESET_STRATEGIES.get(key, ComparisonStrategy.SAME_LENGTH)

    resolved = ResolvedPeriod(
        since=since,
        until=until,
        day_count=(until - since).days + 1,
        comparison_strategy=strategy,
        preset=key,
        reference_date=today,
    )

    logger.debug(
        f"Preset {key} ({timezone}) -> {resolved.since} - {resolved.until} "
        f"({resolved.day_count} days, compare: {strategy.value})"
    )
    return resolved


# ---------------------------------------------------------------------------
# Предыдущий период
# ---------------------------------------------------------------------------

def previous_period(resolved: ResolvedPeriod) -> Optional[DateRange]:
    """
    Период для сравнения по стратегии текущего периода

    Args:
        resolved: текущий период

    Returns:
        DateRange или None, если сравнение не предусмотрено
    """
    strategy = resolved.comparison_strategy

    if strategy == ComparisonStrategy.NONE:
        logger.debug(f"No comparison for preset {resolved.preset}")
        return None

    if strategy == ComparisonStrategy.TWO_MONTHS_PRIOR:
        # Текущий период уже "прошлый месяц" - берем месяц перед ним целиком
        month_start = add_months(first_day_of_month(resolved.since), -1)
        result = DateRange(since=month_start, until=end_of_month(month_start))

    elif strategy == ComparisonStrategy.PREVIOUS_CALENDAR_MONTH:
        # Месяц к дате против прошлого месяца к тому же числу
        anchor = resolved.reference_date
        month_start = add_months(first_day_of_month(anchor), -1)
        until_day = min(anchor.day, last_day_of_month(month_start.year, month_start.month))
        result = DateRange(since=month_start, until=month_start.replace(day=until_day))

    elif strategy == ComparisonStrategy.PREVIOUS_CALENDAR_YEAR:
        result = DateRange(
            since=shift_years(resolved.since, -1),
            until=shift_years(resolved.until, -1),
        )

    else:
        # SAME_LENGTH: заканчивается за день до начала текущего, та же длина
        try:
            until = resolved.since - timedelta(days=1)
            since = until - timedelta(days=resolved.day_count - 1)
        except OverflowError:
            raise InvalidRange(
                f"No comparison period before {resolved.since}", resolved.since, resolved.until
            )
        result = DateRange(since=since, until=until)

    logger.debug(
        f"Previous period for {resolved.since} - {resolved.until} "
        f"({strategy.value}): {result.since} - {result.until}"
    )
    return result


# ---------------------------------------------------------------------------
# Все именованные окна разом
# ---------------------------------------------------------------------------

def _month_to_date(month_start: date, days_into_month: int) -> DateRange:
    # Пропорциональный период, ограниченный концом месяца
    until = min(month_start + timedelta(days=days_into_month - 1), end_of_month(month_start))
    return DateRange(since=month_start, until=until)


def _quarter_to_date(quarter_start: date, days_into_quarter: int) -> DateRange:
    quarter_end = add_months(quarter_start, 3) - timedelta(days=1)
    until = min(quarter_start + timedelta(days=days_into_quarter - 1), quarter_end)
    return DateRange(since=quarter_start, until=until)


def calculate_time_periods(
    timezone: Optional[str] = None,
    *,
    context: Optional[EngineContext] = None,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Все именованные периоды относительно "сегодня" в timezone проекта

    Используется отчетами и ассистентом, которым нужны сразу все окна:
    дни, недели, месяцы и кварталы (прошлые месяцы/кварталы -
    пропорционально текущему числу), годы.

    Returns:
        Словарь: reference_date, days_into_month, days_into_quarter
        и DateRange по имени окна
    """
    context = context or DEFAULT_CONTEXT
    today = datetime_utils.get_today(timezone, context, now)

    def window(preset: str) -> DateRange:
        since, until = preset_range(preset, today)
        return DateRange(since=since, until=until)

    month_start = first_day_of_month(today)
    quarter_start = first_day_of_quarter(today)
    days_into_month = (today - month_start).days + 1
    days_into_quarter = (today - quarter_start).days + 1

    week_last = window(PRESET_WEEK_LAST)
    week_before_last_start = week_last.since - timedelta(days=7)

    return {
        'reference_date': today,
        'days_into_month': days_into_month,
        'days_into_quarter': days_into_quarter,
        'today': window(PRESET_TODAY),
        'yesterday': window(PRESET_YESTERDAY),
        'last_7_days': window(PRESET_LAST_7D),
        'last_14_days': window(PRESET_LAST_14D),
        'last_30_days': window(PRESET_LAST_30D),
        'last_60_days': window(PRESET_LAST_60D),
        'last_90_days': window(PRESET_LAST_90D),
        'this_year': window(PRESET_THIS_YEAR),
        'last_year': window(PRESET_LAST_YEAR),
        'week_current': window(PRESET_WEEK_CURRENT),
        'week_last': week_last,
        'week_before_last': DateRange(
            since=week_before_last_start,
            until=get_week_end(week_before_last_start),
        ),
        'month_current': window(PRESET_THIS_MONTH),
        'month_last': _month_to_date(add_months(month_start, -1), days_into_month),
        'month_before_last': _month_to_date(add_months(month_start, -2), days_into_month),
        'quarter_current': window(PRESET_QUARTER_CURRENT),
        'quarter_last': _quarter_to_date(add_months(quarter_start, -3), days_into_quarter),
        'quarter_before_last': _quarter_to_date(add_months(quarter_start, -6), days_into_quarter),
    }
