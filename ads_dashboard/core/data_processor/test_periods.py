"""
Тесты резолвера периодов и выбора периода для сравнения

Проверяет:
- границы пресетов относительно "сегодня" в timezone проекта
- переходы через границы месяца и года, 29 февраля
- стратегии сравнения для каждого пресета
- ошибки InvalidPreset / InvalidRange

Использование:
    pytest ads_dashboard/core/data_processor/test_periods.py
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from ads_dashboard.core.data_processor import (
    PRESETS,
    ComparisonStrategy,
    DateRange,
    EngineContext,
    InvalidPreset,
    InvalidRange,
    calculate_time_periods,
    previous_period,
    resolve_period,
    validate_selection,
)
from ads_dashboard.core.data_processor.periods import add_months, shift_years
from ads_dashboard.utils.datetime_utils import get_today


SAO_PAULO = 'America/Sao_Paulo'


def at(year, month, day, hour=15):
    """Момент в UTC; 15:00 UTC = 12:00 в Сан-Паулу"""
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def resolve(preset, today, custom_range=None, tz=SAO_PAULO):
    return resolve_period(preset, tz, custom_range, now=at(today.year, today.month, today.day))


# ---------------------------------------------------------------------------
# "Сегодня" в timezone проекта
# ---------------------------------------------------------------------------

def test_today_uses_project_offset():
    """02:00 UTC 1 марта - еще 29 февраля в Сан-Паулу и уже 1 марта в Токио"""
    now = datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc)

    assert get_today(SAO_PAULO, now=now) == date(2024, 2, 29)
    assert get_today('Asia/Tokyo', now=now) == date(2024, 3, 1)
    assert get_today('UTC', now=now) == date(2024, 3, 1)


def test_unknown_timezone_falls_back_to_default_offset():
    now = datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc)

    assert get_today('Mars/Olympus_Mons', now=now) == date(2024, 2, 29)
    assert get_today(None, now=now) == date(2024, 2, 29)


def test_custom_offset_table_from_context():
    context = EngineContext(timezone_offsets={'Pacific/Test': 10}, default_offset_hours=0)
    now = datetime(2024, 3, 1, 20, 0, tzinfo=timezone.utc)

    assert get_today('Pacific/Test', context, now) == date(2024, 3, 2)
    assert get_today(SAO_PAULO, context, now) == date(2024, 3, 1)


def test_naive_now_is_treated_as_utc():
    assert get_today(SAO_PAULO, now=datetime(2024, 3, 1, 2, 0)) == date(2024, 2, 29)


def test_iana_mode_respects_dst():
    """Летом Нью-Йорк живет по UTC-4, таблица смещений знает только UTC-5"""
    now = datetime(2024, 7, 1, 4, 30, tzinfo=timezone.utc)
    fixed = EngineContext()
    iana = EngineContext(timezone_mode='iana')

    assert get_today('America/New_York', fixed, now) == date(2024, 6, 30)
    assert get_today('America/New_York', iana, now) == date(2024, 7, 1)


def test_iana_mode_invalid_zone_falls_back_to_table():
    iana = EngineContext(timezone_mode='iana')
    now = datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc)

    assert get_today('Not/A_Zone', iana, now) == date(2024, 2, 29)


def test_context_rejects_unknown_timezone_mode():
    with pytest.raises(ValueError):
        EngineContext(timezone_mode='local')


# ---------------------------------------------------------------------------
# Границы пресетов
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('preset, today, since, until', [
    ('today', date(2024, 3, 10), date(2024, 3, 10), date(2024, 3, 10)),
    ('yesterday', date(2024, 3, 1), date(2024, 2, 29), date(2024, 2, 29)),
    ('last_7d', date(2024, 1, 3), date(2023, 12, 28), date(2024, 1, 3)),
    ('last_30d', date(2024, 3, 10), date(2024, 2, 10), date(2024, 3, 10)),
    ('last_90d', date(2024, 3, 31), date(2024, 1, 2), date(2024, 3, 31)),
    ('week_current', date(2024, 1, 17), date(2024, 1, 15), date(2024, 1, 17)),
    ('week_last', date(2024, 1, 17), date(2024, 1, 8), date(2024, 1, 14)),
    ('this_month', date(2024, 3, 31), date(2024, 3, 1), date(2024, 3, 31)),
    ('last_month', date(2024, 1, 15), date(2023, 12, 1), date(2023, 12, 31)),
    ('last_month', date(2024, 3, 31), date(2024, 2, 1), date(2024, 2, 29)),
    ('quarter_current', date(2024, 5, 10), date(2024, 4, 1), date(2024, 5, 10)),
    ('quarter_last', date(2024, 2, 10), date(2023, 10, 1), date(2023, 12, 31)),
    ('this_year', date(2024, 2, 29), date(2024, 1, 1), date(2024, 2, 29)),
    ('last_year', date(2024, 6, 1), date(2023, 1, 1), date(2023, 12, 31)),
])
def test_preset_bounds(preset, today, since, until):
    period = resolve(preset, today)

    assert period.since == since
    assert period.until == until
    assert period.day_count == (until - since).days + 1
    assert period.reference_date == today


def test_last_month_in_january_is_december_of_prior_year():
    period = resolve('last_month', date(2024, 1, 15))

    assert (period.since, period.until) == (date(2023, 12, 1), date(2023, 12, 31))
    assert period.day_count == 31


def test_all_presets_have_ordered_bounds():
    """since <= until для каждого пресета на границах месяцев и лет"""
    days = [date(2024, 1, 1), date(2024, 2, 29), date(2024, 3, 31), date(2023, 12, 31), date(2024, 7, 15)]
    zones = [SAO_PAULO, 'Asia/Tokyo', 'Australia/Sydney', 'Unknown/Zone']

    for preset in PRESETS:
        if preset == 'custom':
            continue
        for today in days:
            for tz in zones:
                period = resolve(preset, today, tz=tz)
                assert period.since <= period.until, (preset, today, tz)
                assert period.day_count == (period.until - period.since).days + 1


def test_preset_aliases():
    today = date(2024, 3, 10)

    assert resolve('last_7_days', today).preset == 'last_7d'
    assert resolve('month_current', today).preset == 'this_month'
    assert resolve('month_last', today).preset == 'last_month'
    assert resolve(' Last_30D ', today).preset == 'last_30d'


@pytest.mark.parametrize('preset', ['last_8d', '', 'next_month', None])
def test_unknown_preset(preset):
    with pytest.raises(InvalidPreset):
        resolve_period(preset, SAO_PAULO)


# ---------------------------------------------------------------------------
# Произвольный период
# ---------------------------------------------------------------------------

def test_custom_range_inputs():
    expected = (date(2024, 1, 10), date(2024, 1, 20))

    for custom_range in (
        {'from': '2024-01-10', 'to': '2024-01-20'},
        {'since': date(2024, 1, 10), 'until': date(2024, 1, 20)},
        ('2024-01-10', '2024-01-20'),
        DateRange(since=date(2024, 1, 10), until=date(2024, 1, 20)),
    ):
        period = resolve_period('custom', SAO_PAULO, custom_range)
        assert (period.since, period.until) == expected
        assert period.day_count == 11
        assert period.comparison_strategy == ComparisonStrategy.SAME_LENGTH


def test_custom_range_single_day():
    period = resolve_period('custom', SAO_PAULO, {'from': '2024-01-10', 'to': '2024-01-10'})

    assert period.day_count == 1


@pytest.mark.parametrize('custom_range', [
    None,
    {'from': '2024-01-10'},
    {'to': '2024-01-10'},
    {'from': '2024-01-20', 'to': '2024-01-10'},
    {'from': 'yesterday', 'to': '2024-01-10'},
    ('2024-01-10',),
])
def test_invalid_custom_range(custom_range):
    with pytest.raises(InvalidRange):
        resolve_period('custom', SAO_PAULO, custom_range)


def test_invalid_range_is_value_error():
    with pytest.raises(ValueError):
        validate_selection('custom', {'from': '2024-01-20', 'to': '2024-01-10'})


def test_validate_selection_returns_canonical_key():
    assert validate_selection('last_14_days') == 'last_14d'
    assert validate_selection('custom', ('2024-01-01', '2024-01-02')) == 'custom'


# ---------------------------------------------------------------------------
# Период для сравнения
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('preset, strategy', [
    ('this_month', ComparisonStrategy.PREVIOUS_CALENDAR_MONTH),
    ('this_year', ComparisonStrategy.PREVIOUS_CALENDAR_YEAR),
    ('last_month', ComparisonStrategy.TWO_MONTHS_PRIOR),
    ('last_year', ComparisonStrategy.NONE),
    ('last_7d', ComparisonStrategy.SAME_LENGTH),
    ('yesterday', ComparisonStrategy.SAME_LENGTH),
    ('quarter_last', ComparisonStrategy.SAME_LENGTH),
])
def test_strategy_per_preset(preset, strategy):
    assert resolve(preset, date(2024, 3, 10)).comparison_strategy == strategy


def test_same_length_previous_period():
    period = resolve('last_7d', date(2024, 1, 3))
    previous = previous_period(period)

    assert (previous.since, previous.until) == (date(2023, 12, 21), date(2023, 12, 27))
    assert previous.day_count == period.day_count
    assert previous.until == period.since - timedelta(days=1)


def test_same_length_keeps_day_count_for_every_preset():
    for preset in PRESETS:
        if preset == 'custom':
            continue
        period = resolve(preset, date(2024, 3, 31))
        if period.comparison_strategy != ComparisonStrategy.SAME_LENGTH:
            continue
        previous = previous_period(period)
        assert previous.day_count == period.day_count, preset
        assert previous.until < period.since


def test_custom_previous_period_crosses_year():
    period = resolve_period('custom', SAO_PAULO, {'from': '2024-01-10', 'to': '2024-01-20'})
    previous = previous_period(period)

    assert (previous.since, previous.until) == (date(2023, 12, 30), date(2024, 1, 9))


def test_custom_range_without_room_for_previous_period():
    with pytest.raises(InvalidRange):
        resolve_period('custom', 'UTC', {'from': '0001-01-01', 'to': '0001-01-03'})
    with pytest.raises(InvalidRange):
        validate_selection('custom', DateRange(since=date(1, 1, 2), until=date(1, 1, 3)))


def test_custom_range_fits_exactly_at_start_of_calendar():
    period = resolve_period('custom', 'UTC', {'from': '0001-01-04', 'to': '0001-01-06'})
    previous = previous_period(period)

    assert (previous.since, previous.until) == (date(1, 1, 1), date(1, 1, 3))


def test_previous_period_before_first_date_is_invalid_range():
    period = resolve('today', date(1, 1, 1))

    with pytest.raises(InvalidRange):
        previous_period(period)


def test_previous_calendar_month_clamps_day():
    """31 марта: сравниваем с 1-29 февраля"""
    previous = previous_period(resolve('this_month', date(2024, 3, 31)))

    assert (previous.since, previous.until) == (date(2024, 2, 1), date(2024, 2, 29))


def test_previous_calendar_month_in_january():
    previous = previous_period(resolve('this_month', date(2024, 1, 15)))

    assert (previous.since, previous.until) == (date(2023, 12, 1), date(2023, 12, 15))


def test_two_months_prior_for_last_month():
    previous = previous_period(resolve('last_month', date(2024, 1, 15)))

    assert (previous.since, previous.until) == (date(2023, 11, 1), date(2023, 11, 30))


def test_previous_calendar_year_feb_29():
    previous = previous_period(resolve('this_year', date(2024, 2, 29)))

    assert (previous.since, previous.until) == (date(2023, 1, 1), date(2023, 2, 28))


def test_last_year_has_no_previous_period():
    assert previous_period(resolve('last_year', date(2024, 6, 1))) is None


# ---------------------------------------------------------------------------
# Календарная арифметика и все окна
# ---------------------------------------------------------------------------

def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
    assert add_months(date(2023, 3, 31), -1) == date(2023, 2, 28)
    assert add_months(date(2024, 1, 15), -1) == date(2023, 12, 15)
    assert add_months(date(2023, 11, 30), 3) == date(2024, 2, 29)


def test_shift_years_feb_29():
    assert shift_years(date(2024, 2, 29), -1) == date(2023, 2, 28)
    assert shift_years(date(2024, 2, 29), -4) == date(2020, 2, 29)


def test_calculate_time_periods():
    periods = calculate_time_periods(SAO_PAULO, now=at(2024, 3, 31))

    assert periods['reference_date'] == date(2024, 3, 31)
    assert periods['days_into_month'] == 31
    assert periods['days_into_quarter'] == 91
    assert periods['month_current'] == DateRange(since=date(2024, 3, 1), until=date(2024, 3, 31))
    # Прошлый месяц пропорционально, но не дальше его конца
    assert periods['month_last'] == DateRange(since=date(2024, 2, 1), until=date(2024, 2, 29))
    assert periods['month_before_last'] == DateRange(since=date(2024, 1, 1), until=date(2024, 1, 31))
    assert periods['quarter_last'] == DateRange(since=date(2023, 10, 1), until=date(2023, 12, 30))
    assert periods['week_last'].day_count == 7
    assert periods['week_before_last'].until == periods['week_last'].since - timedelta(days=1)
