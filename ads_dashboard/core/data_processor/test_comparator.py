"""
Тесты сравнения периодов

Использование:
    pytest ads_dashboard/core/data_processor/test_comparator.py
"""
from datetime import date

import pytest

from ads_dashboard.core.data_processor import (
    RawDailyRow,
    aggregate_daily,
    build_comparison,
    calculate_change,
    calculate_changes,
    calculate_totals,
)
from ads_dashboard.core.data_processor.comparator import COMPARED_METRICS


def days_with(**values):
    return aggregate_daily([RawDailyRow(date=date(2024, 3, 1), **values)])


def test_calculate_change():
    assert calculate_change(150, 100) == pytest.approx(50.0)
    assert calculate_change(50, 100) == pytest.approx(-50.0)
    assert calculate_change(100, 100) == 0.0


def test_calculate_change_from_zero():
    assert calculate_change(1000, 0) == 100.0
    assert calculate_change(0.01, 0) == 100.0
    assert calculate_change(0, 0) == 0.0


def test_spend_from_zero_is_hundred_percent():
    comparison = build_comparison(days_with(spend=1000), days_with(spend=0))

    assert comparison.current_totals.spend == 1000
    assert comparison.previous_totals.spend == 0
    assert comparison.changes['spend'] == 100


def test_changes_cover_all_metrics():
    current = days_with(spend=200, impressions=4000, clicks=40, conversions=4, conversion_value=800)
    previous = days_with(spend=100, impressions=4000, clicks=20, conversions=4, conversion_value=200)

    comparison = build_comparison(current, previous)

    assert set(comparison.changes) == set(COMPARED_METRICS)
    assert comparison.changes['spend'] == pytest.approx(100.0)
    assert comparison.changes['impressions'] == 0.0
    assert comparison.changes['clicks'] == pytest.approx(100.0)
    assert comparison.changes['revenue'] == pytest.approx(300.0)
    assert comparison.changes['ctr'] == pytest.approx(100.0)
    assert comparison.changes['roas'] == pytest.approx(100.0)


def test_no_previous_period_omits_changes():
    comparison = build_comparison(days_with(spend=10))

    assert comparison.changes is None
    assert comparison.details is None
    assert comparison.previous_totals is None
    assert comparison.previous == ()
    assert comparison.current_totals.spend == 10


def test_empty_previous_period_still_compares():
    comparison = build_comparison(days_with(spend=10), [])

    assert comparison.changes is not None
    assert comparison.changes['spend'] == 100.0
    assert comparison.previous_totals.days == 0


def test_trend_and_favorable():
    current = days_with(spend=200, impressions=1000, clicks=10)
    previous = days_with(spend=100, impressions=1000, clicks=10)

    details = calculate_changes(calculate_totals(current), calculate_totals(previous))

    assert details['spend'].trend == 'up'
    assert details['spend'].absolute == pytest.approx(100.0)
    assert details['spend'].favorable is True
    # Стоимость клика выросла - это плохо
    assert details['cpc'].trend == 'up'
    assert details['cpc'].favorable is False
    assert details['clicks'].trend == 'stable'
    assert details['clicks'].favorable is None


def test_cost_decrease_is_favorable():
    current = days_with(spend=50, impressions=1000, clicks=10)
    previous = days_with(spend=100, impressions=1000, clicks=10)

    details = build_comparison(current, previous).details

    assert details['cpm'].trend == 'down'
    assert details['cpm'].favorable is True
    assert details['spend'].favorable is False


def test_fetch_errors_mark_incomplete():
    comparison = build_comparison(days_with(spend=10), fetch_errors=['boom'])

    assert comparison.complete is False
    assert comparison.fetch_errors == ('boom',)


def test_is_empty_defaults_to_no_days():
    assert build_comparison([]).is_empty is True
    assert build_comparison(days_with(spend=1)).is_empty is False


def test_inputs_not_mutated():
    current = days_with(spend=200)
    previous = days_with(spend=100)
    current_snapshot = [d.model_dump() for d in current]
    previous_snapshot = [d.model_dump() for d in previous]

    build_comparison(current, previous)

    assert [d.model_dump() for d in current] == current_snapshot
    assert [d.model_dump() for d in previous] == previous_snapshot
