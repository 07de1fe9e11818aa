"""
Утилиты для определения "сегодня" в timezone проекта

Режим 'fixed' использует таблицу фиксированных смещений из EngineContext
(без DST). Режим 'iana' использует zoneinfo и при неизвестной timezone
откатывается к таблице смещений.
"""
import logging
from datetime import date, datetime, timedelta, timezone as dt_timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ads_dashboard.core.data_processor.context import (
    DEFAULT_CONTEXT,
    TIMEZONE_MODE_IANA,
    EngineContext,
)


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Текущий момент в UTC (timezone-aware)"""
    return datetime.now(dt_timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    # Naive datetime считаем UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=dt_timezone.utc)
    return moment.astimezone(dt_timezone.utc)


def get_utc_offset(timezone: Optional[str], context: Optional[EngineContext] = None) -> float:
    """
    Смещение timezone от UTC в часах по таблице контекста.

    Args:
        timezone: имя timezone (например, 'America/Sao_Paulo')
        context: контекст движка

    Returns:
        Смещение в часах (default_offset_hours для неизвестных timezone)
    """
    context = context or DEFAULT_CONTEXT
    if timezone not in context.timezone_offsets:
        logger.debug(
            f"Timezone {timezone!r} not in offset table, "
            f"using default offset {context.default_offset_hours:+g}h"
        )
    return context.offset_for(timezone)


def get_local_now(
    timezone: Optional[str],
    context: Optional[EngineContext] = None,
    now: Optional[datetime] = None
) -> datetime:
    """
    Текущее время в timezone проекта.

    Args:
        timezone: имя timezone
        context: контекст движка
        now: момент времени для расчета (по умолчанию - сейчас)

    Returns:
        datetime в локальном времени проекта
    """
    context = context or DEFAULT_CONTEXT
    moment = _as_utc(now or utc_now())

    if context.timezone_mode == TIMEZONE_MODE_IANA and timezone:
        try:
            return moment.astimezone(ZoneInfo(timezone))
        except (ZoneInfoNotFoundError, ValueError) as e:
            logger.warning(f"Invalid timezone {timezone!r}, falling back to offset table: {e}")

    offset = get_utc_offset(timezone, context)
    return moment.astimezone(dt_timezone(timedelta(hours=offset)))


def get_today(
    timezone: Optional[str],
    context: Optional[EngineContext] = None,
    now: Optional[datetime] = None
) -> date:
    """Календарная дата "сегодня" в timezone проекта"""
    return get_local_now(timezone, context, now).date()
