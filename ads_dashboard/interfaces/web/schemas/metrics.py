"""
Pydantic схемы для периодов и сравнения метрик.
"""
from pydantic import BaseModel
from typing import List, Optional

from ads_dashboard.core.data_processor import DateRange, PeriodComparison, ResolvedPeriod


class PresetInfo(BaseModel):
    """Пресет периода"""
    key: str
    label: str


class PresetListResponse(BaseModel):
    """Список пресетов в порядке селектора"""
    presets: List[PresetInfo]
    default: str


class PeriodResolveResponse(BaseModel):
    """Резолвнутый период и период для сравнения"""
    period: ResolvedPeriod
    previous_period: Optional[DateRange] = None


class ComparisonResponse(PeriodComparison):
    """Сравнение периодов проекта"""
    project_id: str
