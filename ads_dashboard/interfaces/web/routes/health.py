# -*- coding: utf-8 -*-
"""
Health check endpoints.
"""
from fastapi import APIRouter
from typing import Dict, Any
import logging

from ads_dashboard import __version__
from ads_dashboard.config import get_config

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Базовый health check.

    Returns:
        Dict со статусом сервиса
    """
    return {
        "status": "ok",
        "service": "ads-dashboard",
        "version": __version__,
        "row_store": get_config().get("row_store.backend"),
    }


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Liveness probe для Kubernetes/Docker.

    Returns:
        Dict со статусом живости
    """
    return {"status": "alive"}
