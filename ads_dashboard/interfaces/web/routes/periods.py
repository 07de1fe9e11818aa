# -*- coding: utf-8 -*-
"""
API endpoints для периодов.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
import logging

from ads_dashboard.config import get_config
from ads_dashboard.core.data_processor import (
    DEFAULT_PRESET,
    PRESET_LABELS,
    EngineContext,
    InvalidPreset,
    InvalidRange,
    previous_period,
    resolve_period,
)
from ..dependencies import get_engine_context
from ..schemas import PeriodResolveResponse, PresetInfo, PresetListResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def build_custom_range(since: Optional[str], until: Optional[str]):
    """Границы произвольного периода из query параметров"""
    if since is None and until is None:
        return None
    return {"from": since, "to": until}


@router.get("/periods/presets", response_model=PresetListResponse)
async def list_presets():
    """
    Список пресетов периода в порядке селектора.

    Returns:
        Ключи и названия пресетов
    """
    return PresetListResponse(
        presets=[PresetInfo(key=key, label=label) for key, label in PRESET_LABELS.items()],
        default=DEFAULT_PRESET,
    )


@router.get("/periods/resolve", response_model=PeriodResolveResponse)
async def resolve(
    preset: str = Query(DEFAULT_PRESET, description="Ключ пресета: last_7d, this_month, custom, ..."),
    timezone: Optional[str] = Query(None, description="Timezone проекта (по умолчанию DEFAULT_TIMEZONE)"),
    since: Optional[str] = Query(None, description="Начало для custom (YYYY-MM-DD)"),
    until: Optional[str] = Query(None, description="Конец для custom (YYYY-MM-DD)"),
    context: EngineContext = Depends(get_engine_context)
):
    """
    Резолвит пресет в календарные границы и период для сравнения.

    Returns:
        Период и период для сравнения (null, если сравнение не предусмотрено)
    """
    timezone = timezone or get_config().timezone

    try:
        period = resolve_period(preset, timezone, build_custom_range(since, until), context=context)
        previous = previous_period(period)
    except (InvalidPreset, InvalidRange) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PeriodResolveResponse(period=period, previous_period=previous)
