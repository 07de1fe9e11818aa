"""
Расчет периодов, агрегация и сравнение метрик
"""
from .aggregator import MAX_DENSE_DAYS, aggregate_daily, calculate_totals, check_dense_range, get_week_start
from .comparator import build_comparison, calculate_change, calculate_changes
from .context import EngineContext, DEFAULT_CONTEXT
from .exceptions import (
    MetricsEngineError,
    InvalidPreset,
    InvalidRange,
    RowStoreError,
    FetchFailure,
    PaginationLimitExceeded,
    ProjectNotFound,
)
from .metrics import calculate_derived_metrics, safe_divide
from .models import (
    ADDITIVE_FIELDS,
    DERIVED_FIELDS,
    ComparisonStrategy,
    RawDailyRow,
    DailyAggregate,
    PeriodTotals,
    DateRange,
    ResolvedPeriod,
    EntityScope,
    FieldChange,
    PeriodComparison,
)
from .periods import (
    PRESETS,
    DEFAULT_PRESET,
    PRESET_LABELS,
    resolve_period,
    previous_period,
    validate_selection,
    calculate_time_periods,
)

__all__ = [
    'aggregate_daily',
    'calculate_totals',
    'check_dense_range',
    'MAX_DENSE_DAYS',
    'get_week_start',
    'build_comparison',
    'calculate_change',
    'calculate_changes',
    'EngineContext',
    'DEFAULT_CONTEXT',
    'MetricsEngineError',
    'InvalidPreset',
    'InvalidRange',
    'RowStoreError',
    'FetchFailure',
    'PaginationLimitExceeded',
    'ProjectNotFound',
    'calculate_derived_metrics',
    'safe_divide',
    'ADDITIVE_FIELDS',
    'DERIVED_FIELDS',
    'ComparisonStrategy',
    'RawDailyRow',
    'DailyAggregate',
    'PeriodTotals',
    'DateRange',
    'ResolvedPeriod',
    'EntityScope',
    'FieldChange',
    'PeriodComparison',
    'PRESETS',
    'DEFAULT_PRESET',
    'PRESET_LABELS',
    'resolve_period',
    'previous_period',
    'validate_selection',
    'calculate_time_periods',
]
