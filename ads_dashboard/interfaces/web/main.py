"""
Основное приложение FastAPI.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
import logging
from datetime import datetime
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from ads_dashboard import __version__
from ads_dashboard.config import get_config

# Импортируем роуты
from .routes import health, periods, metrics

logger = logging.getLogger(__name__)

# Глобальная переменная для отслеживания времени старта приложения
APP_START_TIME = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Управление жизненным циклом приложения.
    """
    # Startup
    global APP_START_TIME
    APP_START_TIME = datetime.now()

    logger.info("Starting Ads Dashboard API...")

    config = get_config()
    logger.info(f"Environment: {config.environment}")
    logger.info(f"Debug mode: {config.debug}")
    logger.info(f"Row store backend: {config.get('row_store.backend')}")

    # Таблицы нужны только локальному хранилищу
    if config.get("row_store.backend") == "database":
        try:
            from ads_dashboard.storage.database import create_tables
            create_tables()
        except Exception as e:
            logger.error(f"Failed to create database tables: {e}")

    yield

    # Shutdown
    logger.info("Shutting down Ads Dashboard API...")


# Создаем приложение FastAPI
app = FastAPI(
    title="Ads Dashboard API",
    description="API дневных метрик рекламы и сравнения периодов",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Настройка Rate Limiting
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Настройка Response Compression
app.add_middleware(GZipMiddleware, minimum_size=1000)  # Сжимаем ответы > 1KB

# Настройка CORS
config = get_config()
cors_origins_str = str(config.get("cors.origins", "*"))

# Парсим CORS origins из строки
if cors_origins_str == "*":
    cors_origins = ["*"]
    allow_credentials = False  # С allow_origins=["*"] нельзя использовать allow_credentials=True
else:
    cors_origins = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]
    allow_credentials = True

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Подключаем роуты API
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(periods.router, prefix="/api/v1", tags=["periods"])
app.include_router(metrics.router, prefix="/api/v1", tags=["metrics"])
