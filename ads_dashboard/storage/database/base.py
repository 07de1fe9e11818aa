"""
Базовая настройка SQLAlchemy
"""
import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, scoped_session, sessionmaker

from ads_dashboard.config import get_config


logger = logging.getLogger(__name__)

# Базовый класс для моделей
Base = declarative_base()

# Глобальные объекты
_engine = None
_session_factory = None


def build_engine(database_url: str, echo: bool = False):
    """
    Создает движок SQLAlchemy для URL

    Args:
        database_url: URL базы данных
        echo: логировать SQL

    Returns:
        Engine
    """
    # Настройки для SQLite
    if database_url.startswith('sqlite'):
        connect_args = {
            "check_same_thread": False,
            "timeout": 30  # 30 секунд таймаут для locked database
        }
    else:
        connect_args = {}

    return create_engine(
        database_url,
        echo=echo,
        connect_args=connect_args,
        pool_pre_ping=True  # Проверка соединения перед использованием
    )


def get_engine():
    """
    Получает или создает движок SQLAlchemy
    """
    global _engine

    if _engine is None:
        config = get_config()
        database_url = config.database_url

        _engine = build_engine(database_url, echo=config.debug)

        logger.info(f"Database engine created: {database_url.split('://')[0]}")

    return _engine


def get_session_factory():
    """
    Получает фабрику сессий
    """
    global _session_factory

    if _session_factory is None:
        engine = get_engine()
        _session_factory = scoped_session(
            sessionmaker(
                autocommit=False,
                autoflush=False,
                bind=engine
            )
        )

        logger.info("Session factory created")

    return _session_factory


@contextmanager
def session_scope(session_factory: Optional[sessionmaker] = None):
    """
    Context manager для безопасной работы с сессией БД

    Использование:
        from ads_dashboard.storage.database import session_scope

        with session_scope() as session:
            project = session.get(Project, project_id)
            # commit() вызывается автоматически при выходе из блока
            # rollback() вызывается автоматически при ошибке

    Args:
        session_factory: фабрика сессий (по умолчанию - глобальная)

    Returns:
        Session объект для работы с БД
    """
    factory = session_factory or get_session_factory()
    session = factory()

    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Session error in session_scope: {e}")
        raise
    finally:
        session.close()


def create_tables(engine=None):
    """
    Создает все таблицы в БД
    """
    from . import models  # noqa

    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("All tables created")


def drop_tables(engine=None):
    """
    Удаляет все таблицы из БД (ОСТОРОЖНО!)
    """
    from . import models  # noqa

    engine = engine or get_engine()
    Base.metadata.drop_all(bind=engine)
    logger.warning("All tables dropped")
