# -*- coding: utf-8 -*-
"""
API endpoints для сравнения метрик проекта.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing import Literal, Optional
import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

from ads_dashboard.core.data_processor import (
    DEFAULT_PRESET,
    EngineContext,
    EntityScope,
    InvalidPreset,
    InvalidRange,
    PaginationLimitExceeded,
    ProjectNotFound,
)
from ads_dashboard.core.row_store import RowStore
from ads_dashboard.services import load_comparison
from ..dependencies import get_engine_context, get_row_store
from ..schemas import ComparisonResponse
from .periods import build_custom_range

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/projects/{project_id}/comparison", response_model=ComparisonResponse)
@limiter.limit("60/minute")
async def get_comparison(
    request: Request,
    project_id: str,
    preset: str = Query(DEFAULT_PRESET, description="Ключ пресета: last_7d, this_month, custom, ..."),
    since: Optional[str] = Query(None, description="Начало для custom (YYYY-MM-DD)"),
    until: Optional[str] = Query(None, description="Конец для custom (YYYY-MM-DD)"),
    dense: bool = Query(False, description="Заполнять дни без данных нулями"),
    level: Optional[Literal["campaign", "ad_set", "ad"]] = Query(None, description="Уровень сущности для фильтра"),
    entity_id: Optional[str] = Query(None, description="ID кампании/группы/объявления"),
    store: RowStore = Depends(get_row_store),
    context: EngineContext = Depends(get_engine_context)
):
    """
    Сравнение текущего и предыдущего периодов проекта.

    Args:
        project_id: ID проекта
        preset: ключ пресета
        since, until: границы для custom
        dense: заполнять пустые дни нулями
        level, entity_id: фильтр по сущности

    Returns:
        Дневные агрегаты, итоги и изменения (changes = null, если сравнивать не с чем)
    """
    if (level is None) != (entity_id is None):
        raise HTTPException(status_code=400, detail="level and entity_id must be passed together")

    entity = EntityScope(level=level, entity_id=entity_id) if level else None

    try:
        comparison = await load_comparison(
            project_id,
            preset,
            build_custom_range(since, until),
            store=store,
            context=context,
            entity=entity,
            dense=dense,
        )
    except (InvalidPreset, InvalidRange) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProjectNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PaginationLimitExceeded as e:
        logger.error(f"Comparison for project {project_id} aborted: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error building comparison for project {project_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    if not comparison.complete:
        logger.warning(f"Partial comparison for project {project_id}: {'; '.join(comparison.fetch_errors)}")

    return ComparisonResponse(project_id=project_id, **dict(comparison))
