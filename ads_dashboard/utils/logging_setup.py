"""
Централизованная настройка логирования для CLI и веб-сервера
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Union


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def resolve_level(level: Union[int, str]) -> int:
    """Уровень логирования из числа или имени ('DEBUG', 'info', ...)"""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    log_dir: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """
    Настраивает логирование приложения в файл и/или консоль.

    Args:
        level: Уровень логирования (по умолчанию INFO)
        log_file: Путь к файлу логов (если None, используется <log_dir>/app.log)
        console: Выводить логи в консоль (по умолчанию True)
        log_dir: Папка логов (если None, используется logs/ в корне проекта)

    Returns:
        Logger объект для использования в скрипте
    """
    level = resolve_level(level)

    # Используем переданный путь или дефолтный
    if log_file is None:
        if log_dir is None:
            log_dir = Path(__file__).parent.parent.parent / "logs"
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "app.log"
    else:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

    # Создаем корневой logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Удаляем существующие handlers чтобы избежать дублирования
    root_logger.handlers.clear()

    # File handler с ротацией (макс 10MB, 5 бэкапов)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(file_handler)

    # Console handler (опционально)
    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root_logger.addHandler(console_handler)

    return logging.getLogger(__name__)
