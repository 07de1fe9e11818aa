"""
Расчет производных метрик (CTR, CPM, CPC, ROAS, CPA)

Знаменатель проверяется на строго положительное значение.
Ноль или отрицательный знаменатель дают 0, а не NaN/inf:
дальнейшее форматирование рассчитывает на числовые значения.
"""
from typing import Any, Dict, Mapping


def safe_divide(numerator: float, denominator: float, multiplier: float = 1.0) -> float:
    """
    Деление с политикой "нет знаменателя - ноль"

    Args:
        numerator: числитель
        denominator: знаменатель
        multiplier: множитель результата (100 для процентов, 1000 для CPM)

    Returns:
        numerator / denominator * multiplier или 0.0
    """
    if denominator > 0:
        return numerator / denominator * multiplier
    return 0.0


def calculate_derived_metrics(values: Mapping[str, Any]) -> Dict[str, float]:
    """
    Вычисляет производные метрики из аддитивных сумм

    Одинаково применяется к дневному агрегату и к итогам периода.

    Args:
        values: словарь с spend, impressions, clicks, conversions, conversion_value

    Returns:
        Словарь с метриками: ctr, cpm, cpc, roas, cpa
    """
    spend = float(values.get('spend') or 0)
    impressions = float(values.get('impressions') or 0)
    clicks = float(values.get('clicks') or 0)
    conversions = float(values.get('conversions') or 0)
    conversion_value = float(values.get('conversion_value') or 0)

    return {
        'ctr': safe_divide(clicks, impressions, 100),
        'cpm': safe_divide(spend, impressions, 1000),
        'cpc': safe_divide(spend, clicks),
        'roas': safe_divide(conversion_value, spend),
        'cpa': safe_divide(spend, conversions),
    }
