"""
Упрощённый модуль для работы с конфигурацией через .env
"""
import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv

from ads_dashboard.core.data_processor.context import (
    EngineContext,
    DEFAULT_TIMEZONE_OFFSETS,
    TIMEZONE_MODES,
)

logger = logging.getLogger(__name__)


class Config:
    """
    Класс для работы с конфигурацией проекта.
    Загружает настройки из .env файла.
    """

    def __init__(self, env_file: Optional[Path] = None):
        """Инициализация конфигурации"""
        # Определяем корневую папку проекта
        self.root_dir = Path(__file__).parent.parent.parent

        # Загружаем переменные окружения из .env
        env_file = Path(env_file) if env_file else self.root_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)
            logger.info(f"Загружены переменные из {env_file}")
        else:
            logger.warning(f".env файл не найден: {env_file}")

        # Валидация критических параметров
        self._validate_required_config()

    def get(self, path: str, default: Any = None) -> Any:
        """
        Получает значение из переменных окружения.

        Примеры:
            config.get("engine.page_size") -> os.getenv("ROW_PAGE_SIZE")
            config.get("row_store.url") -> os.getenv("ROW_STORE_URL")

        Args:
            path: путь к значению (маппится на переменную окружения)
            default: значение по умолчанию

        Returns:
            Значение из .env или default
        """
        # Маппинг путей на переменные окружения
        env_map = {
            # Database
            "database.url": ("DATABASE_URL", "sqlite:///./data/ads_dashboard.db"),

            # App
            "app.environment": ("ENVIRONMENT", "development"),
            "app.debug": ("DEBUG", "false"),
            "app.log_level": ("LOG_LEVEL", "INFO"),
            "app.log_dir": "LOG_DIR",
            "app.timezone": ("DEFAULT_TIMEZONE", "America/Sao_Paulo"),
            "app.currency": ("DEFAULT_CURRENCY", "BRL"),

            # Engine
            "engine.page_size": ("ROW_PAGE_SIZE", "1000"),
            "engine.max_pages": ("ROW_MAX_PAGES", "500"),
            "engine.default_offset_hours": ("DEFAULT_UTC_OFFSET", "-3"),
            "engine.timezone_mode": ("TIMEZONE_MODE", "fixed"),

            # Row store
            "row_store.backend": ("ROW_STORE_BACKEND", "database"),
            "row_store.url": "ROW_STORE_URL",
            "row_store.api_key": "ROW_STORE_API_KEY",
            "row_store.table": ("ROW_STORE_TABLE", "ads_daily_metrics"),
            "row_store.timeout": ("ROW_STORE_TIMEOUT", "30"),
            "row_store.retry_attempts": ("ROW_STORE_RETRY_ATTEMPTS", "3"),
            "row_store.retry_delay": ("ROW_STORE_RETRY_DELAY", "2"),

            # CORS
            "cors.origins": ("CORS_ORIGINS", "*"),
        }

        mapping = env_map.get(path)

        if mapping is None:
            return default

        # Если mapping это tuple - первый элемент переменная, второй - дефолт
        if isinstance(mapping, tuple):
            env_var, env_default = mapping
            value = os.getenv(env_var, env_default)
        else:
            env_var = mapping
            value = os.getenv(env_var, default)

        # Пытаемся конвертировать в число если возможно
        if isinstance(value, str):
            if value.lower() in ('true', 'false'):
                return value.lower() == 'true'
            try:
                if '.' in value:
                    return float(value)
                return int(value)
            except ValueError:
                return value

        return value

    def get_section(self, section: str) -> Dict:
        """
        Получает целую секцию конфига.

        Args:
            section: имя секции (например, "engine", "row_store")

        Returns:
            Словарь с настройками секции
        """
        sections = {
            "database": {
                "url": self.get("database.url"),
            },
            "app": {
                "environment": self.get("app.environment"),
                "debug": self.get("app.debug"),
                "log_level": self.get("app.log_level"),
                "log_dir": self.get("app.log_dir"),
                "timezone": self.get("app.timezone"),
                "currency": self.get("app.currency"),
            },
            "engine": {
                "page_size": self.get("engine.page_size"),
                "max_pages": self.get("engine.max_pages"),
                "default_offset_hours": self.get("engine.default_offset_hours"),
                "timezone_mode": self.get("engine.timezone_mode"),
            },
            "row_store": {
                "backend": self.get("row_store.backend"),
                "url": self.get("row_store.url"),
                "api_key": self.get("row_store.api_key"),
                "table": self.get("row_store.table"),
                "timeout": self.get("row_store.timeout"),
                "retry_attempts": self.get("row_store.retry_attempts"),
                "retry_delay": self.get("row_store.retry_delay"),
            },
        }

        return sections.get(section, {})

    def _validate_required_config(self):
        """
        Валидирует критическую конфигурацию при запуске.

        Raises:
            ValueError: Если обязательные параметры отсутствуют или невалидны
        """
        errors = []

        page_size = self.get("engine.page_size")
        if not isinstance(page_size, int) or page_size <= 0:
            errors.append("ROW_PAGE_SIZE must be a positive integer")

        max_pages = self.get("engine.max_pages")
        if not isinstance(max_pages, int) or max_pages <= 0:
            errors.append("ROW_MAX_PAGES must be a positive integer")

        offset = self.get("engine.default_offset_hours")
        if not isinstance(offset, (int, float)) or not -12 <= offset <= 14:
            errors.append("DEFAULT_UTC_OFFSET must be a number between -12 and 14")

        if self.get("engine.timezone_mode") not in TIMEZONE_MODES:
            errors.append(f"TIMEZONE_MODE must be one of: {', '.join(TIMEZONE_MODES)}")

        # Проверка хранилища строк
        backend = self.get("row_store.backend")
        if backend not in ("database", "rest"):
            errors.append("ROW_STORE_BACKEND must be 'database' or 'rest'")
        elif backend == "rest":
            url = self.get("row_store.url", "")
            if not url:
                errors.append("ROW_STORE_URL is required for the rest backend")
            elif not str(url).startswith(('http://', 'https://')):
                errors.append("ROW_STORE_URL must start with http:// or https://")
            if not self.get("row_store.api_key", ""):
                errors.append("ROW_STORE_API_KEY is required for the rest backend")

        # Логируем ошибки или успех
        if errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            logger.error(error_msg)
            raise ValueError(error_msg)
        else:
            logger.info("Configuration validated successfully")

    @property
    def database_url(self) -> str:
        db_url = self.get("database.url", "sqlite:///./data/ads_dashboard.db")

        # Обрабатываем только SQLite URLs
        if not db_url.startswith("sqlite:///"):
            return db_url  # Другие типы БД или уже абсолютный путь

        # Извлекаем путь после sqlite:///
        path = db_url.replace("sqlite:///", "")

        # Если относительный путь (начинается с ./ или не начинается с /)
        if path.startswith("./") or (not path.startswith("/") and not (len(path) > 1 and path[1] == ':')):
            path = path.lstrip("./")
            absolute_path = self.root_dir / path
            db_url = f"sqlite:///{absolute_path}"

            # Убеждаемся что директория существует
            db_file = Path(absolute_path)
            db_file.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Database directory ensured: {db_file.parent}")

        return db_url

    @property
    def environment(self) -> str:
        return self.get("app.environment", "development")

    @property
    def debug(self) -> bool:
        return self.get("app.debug", False)

    @property
    def timezone(self) -> str:
        """Возвращает timezone проекта по умолчанию (например, 'America/Sao_Paulo')"""
        return self.get("app.timezone", "America/Sao_Paulo")

    @property
    def currency(self) -> str:
        """Возвращает валюту проекта по умолчанию (ISO код)"""
        return self.get("app.currency", "BRL")

    def get_engine_context(self) -> EngineContext:
        """
        Собирает неизменяемый контекст движка из настроек.

        Движок не читает конфиг сам: контекст передаётся явно
        в каждый вызов резолвера и фетчера.

        Returns:
            EngineContext
        """
        return EngineContext(
            timezone_offsets=dict(DEFAULT_TIMEZONE_OFFSETS),
            default_offset_hours=float(self.get("engine.default_offset_hours", -3)),
            page_size=int(self.get("engine.page_size", 1000)),
            max_pages=int(self.get("engine.max_pages", 500)),
            timezone_mode=self.get("engine.timezone_mode", "fixed"),
        )


# Singleton instance
_config_instance: Optional[Config] = None


def get_config() -> Config:
    """
    Получает синглтон конфигурации.

    Returns:
        Config: Экземпляр конфигурации
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config()
        logger.info("Конфигурация инициализирована")

    return _config_instance


def reload_config():
    """Перезагружает конфигурацию"""
    global _config_instance
    _config_instance = None
    return get_config()
