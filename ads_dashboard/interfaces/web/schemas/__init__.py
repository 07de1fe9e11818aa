"""
Pydantic схемы для API.
"""
from .metrics import (
    PresetInfo,
    PresetListResponse,
    PeriodResolveResponse,
    ComparisonResponse
)

__all__ = [
    "PresetInfo", "PresetListResponse",
    "PeriodResolveResponse", "ComparisonResponse",
]
