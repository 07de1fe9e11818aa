"""
Контекст движка метрик

Все параметры, от которых зависит расчет периодов и пагинация
(таблица смещений timezone, размер страницы, лимит страниц),
передаются явно через EngineContext. Глобального состояния нет.
"""
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Таблица смещений от UTC в часах (упрощение: без учета DST)
DEFAULT_TIMEZONE_OFFSETS: Mapping[str, float] = MappingProxyType({
    'America/Sao_Paulo': -3,
    'America/New_York': -5,
    'America/Los_Angeles': -8,
    'America/Chicago': -6,
    'Europe/London': 0,
    'Europe/Paris': 1,
    'Europe/Berlin': 1,
    'Asia/Tokyo': 9,
    'Asia/Shanghai': 8,
    'Australia/Sydney': 11,
    'UTC': 0,
})

# Смещение для неизвестных timezone (Бразилиа)
DEFAULT_OFFSET_HOURS = -3.0

# Жесткий лимит строк на один запрос к хранилищу
DEFAULT_PAGE_SIZE = 1000

# Защита от бесконечной пагинации
DEFAULT_MAX_PAGES = 500

TIMEZONE_MODE_FIXED = 'fixed'
TIMEZONE_MODE_IANA = 'iana'
TIMEZONE_MODES = (TIMEZONE_MODE_FIXED, TIMEZONE_MODE_IANA)


class EngineContext(BaseModel):
    """Неизменяемые настройки движка"""
    model_config = ConfigDict(frozen=True)

    timezone_offsets: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_TIMEZONE_OFFSETS),
        description="Смещение от UTC в часах по имени timezone"
    )
    default_offset_hours: float = Field(default=DEFAULT_OFFSET_HOURS, ge=-12, le=14)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
    max_pages: int = Field(default=DEFAULT_MAX_PAGES, gt=0)
    timezone_mode: str = Field(default=TIMEZONE_MODE_FIXED)

    @field_validator('timezone_mode')
    @classmethod
    def _check_mode(cls, value: str) -> str:
        if value not in TIMEZONE_MODES:
            raise ValueError(f"timezone_mode must be one of {TIMEZONE_MODES}, got {value!r}")
        return value

    def offset_for(self, timezone: Optional[str]) -> float:
        """Смещение в часах для timezone с fallback на default_offset_hours"""
        if timezone is None:
            return self.default_offset_hours
        return self.timezone_offsets.get(timezone, self.default_offset_hours)


DEFAULT_CONTEXT = EngineContext()
