"""
Модели данных движка метрик

Все модели неизменяемые (frozen): результат пересчета всегда
создается заново, а не мутируется на месте.
"""
from datetime import date
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Аддитивные поля: их можно суммировать между строками
ADDITIVE_FIELDS = (
    'spend',
    'impressions',
    'clicks',
    'reach',
    'conversions',
    'conversion_value',
    'messaging_replies',
    'profile_visits',
)

# Производные поля: всегда пересчитываются из сумм, никогда не суммируются
DERIVED_FIELDS = ('ctr', 'cpm', 'cpc', 'roas', 'cpa')

# Колонки хранилища для фильтра по сущности
ENTITY_COLUMNS = {
    'campaign': 'campaign_id',
    'ad_set': 'ad_set_id',
    'ad': 'ad_id',
}


class ComparisonStrategy(str, Enum):
    """Как выбирать предыдущий период для сравнения"""
    SAME_LENGTH = 'same_length'
    PREVIOUS_CALENDAR_MONTH = 'previous_calendar_month'
    PREVIOUS_CALENDAR_YEAR = 'previous_calendar_year'
    TWO_MONTHS_PRIOR = 'two_months_prior'
    NONE = 'none'


class RawDailyRow(BaseModel):
    """Строка хранилища: одна сущность (объявление) за один день"""
    model_config = ConfigDict(frozen=True, extra='ignore')

    date: date
    campaign_id: Optional[str] = None
    ad_set_id: Optional[str] = None
    ad_id: Optional[str] = None

    spend: float = 0.0
    impressions: int = 0
    clicks: int = 0
    reach: int = 0
    conversions: float = 0.0
    conversion_value: float = 0.0
    messaging_replies: int = 0
    profile_visits: int = 0

    @field_validator(*ADDITIVE_FIELDS, mode='before')
    @classmethod
    def _null_to_zero(cls, value: Any) -> Any:
        # Хранилище отдает NULL для незаполненных счетчиков
        if value is None or value == '':
            return 0
        return value

    @field_validator('campaign_id', 'ad_set_id', 'ad_id', mode='before')
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        if value is None:
            return None
        return str(value)


class MetricValues(BaseModel):
    """Аддитивные суммы + производные метрики"""
    model_config = ConfigDict(frozen=True)

    spend: float = 0.0
    impressions: int = 0
    clicks: int = 0
    reach: int = 0
    conversions: float = 0.0
    conversion_value: float = 0.0
    messaging_replies: int = 0
    profile_visits: int = 0

    ctr: float = 0.0
    cpm: float = 0.0
    cpc: float = 0.0
    roas: float = 0.0
    cpa: float = 0.0


class DailyAggregate(MetricValues):
    """Агрегат за один календарный день"""
    date: date


class PeriodTotals(MetricValues):
    """Итоги за период (производные метрики пересчитаны из сумм периода)"""
    days: int = Field(default=0, description="Количество дневных агрегатов в периоде")


class DateRange(BaseModel):
    """Календарный диапазон [since, until] включительно"""
    model_config = ConfigDict(frozen=True)

    since: date
    until: date

    @model_validator(mode='after')
    def _check_order(self) -> 'DateRange':
        if self.since > self.until:
            raise ValueError(f"since ({self.since}) must not be after until ({self.until})")
        return self

    @property
    def day_count(self) -> int:
        return (self.until - self.since).days + 1


class ResolvedPeriod(BaseModel):
    """Период, полученный из пресета"""
    model_config = ConfigDict(frozen=True)

    since: date
    until: date
    day_count: int
    comparison_strategy: ComparisonStrategy
    preset: str
    reference_date: date = Field(..., description="'Сегодня' в timezone проекта на момент расчета")

    @model_validator(mode='after')
    def _check_bounds(self) -> 'ResolvedPeriod':
        if self.since > self.until:
            raise ValueError(f"since ({self.since}) must not be after until ({self.until})")
        expected = (self.until - self.since).days + 1
        if self.day_count != expected:
            raise ValueError(f"day_count must be {expected}, got {self.day_count}")
        return self

    def as_range(self) -> DateRange:
        return DateRange(since=self.since, until=self.until)


class EntityScope(BaseModel):
    """Фильтр строк по кампании, группе объявлений или объявлению"""
    model_config = ConfigDict(frozen=True)

    level: Literal['campaign', 'ad_set', 'ad']
    entity_id: str

    @property
    def column(self) -> str:
        return ENTITY_COLUMNS[self.level]


class FieldChange(BaseModel):
    """Детали изменения одной метрики"""
    model_config = ConfigDict(frozen=True)

    current: float
    previous: float
    absolute: float
    percent: float
    trend: Literal['up', 'down', 'stable']
    favorable: Optional[bool] = None


class PeriodComparison(BaseModel):
    """Сравнение текущего и предыдущего периодов"""
    model_config = ConfigDict(frozen=True)

    current: Tuple[DailyAggregate, ...] = ()
    previous: Tuple[DailyAggregate, ...] = ()
    current_totals: PeriodTotals
    previous_totals: Optional[PeriodTotals] = None
    # None = сравнение невозможно (а не "без изменений")
    changes: Optional[Dict[str, float]] = None
    details: Optional[Dict[str, FieldChange]] = None

    current_period: Optional[ResolvedPeriod] = None
    previous_period: Optional[DateRange] = None
    currency: Optional[str] = None
    complete: bool = True
    fetch_errors: Tuple[str, ...] = ()
    is_empty: bool = False
