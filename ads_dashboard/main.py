"""
Ads Dashboard - точка входа

Использование:
    ads-dashboard serve                         # Веб-сервер (production)
    ads-dashboard serve --dev                   # Development режим (hot reload)
    ads-dashboard serve --host 0.0.0.0 --port 8000
    ads-dashboard compare PROJECT_ID --preset this_month
    ads-dashboard compare PROJECT_ID --preset custom --since 2024-01-01 --until 2024-01-31
    ads-dashboard init-db                       # Создать таблицы локальной БД
"""
import sys
import asyncio
import argparse
import logging

import uvicorn

from ads_dashboard.config import get_config
from ads_dashboard.utils.logging_setup import setup_logging


def parse_args(argv=None):
    """Парсинг аргументов командной строки"""
    parser = argparse.ArgumentParser(description='Ads Dashboard metrics engine')
    subparsers = parser.add_subparsers(dest='command')

    serve = subparsers.add_parser('serve', help='Run the web server')
    serve.add_argument(
        '--host',
        default='127.0.0.1',
        help='Host to bind (default: 127.0.0.1)'
    )
    serve.add_argument(
        '--port',
        type=int,
        default=8000,
        help='Port to bind (default: 8000)'
    )
    serve.add_argument(
        '--dev',
        action='store_true',
        help='Development mode with hot reload'
    )
    serve.add_argument(
        '--workers',
        type=int,
        default=1,
        help='Number of worker processes (production only)'
    )

    compare = subparsers.add_parser('compare', help='Print period comparison for a project as JSON')
    compare.add_argument('project_id', help='Project ID')
    compare.add_argument('--preset', default='last_7d', help='Date preset (default: last_7d)')
    compare.add_argument('--since', help='Custom range start (YYYY-MM-DD)')
    compare.add_argument('--until', help='Custom range end (YYYY-MM-DD)')
    compare.add_argument('--dense', action='store_true', help='Fill days without rows with zeros')

    subparsers.add_parser('init-db', help='Create local database tables')

    args = parser.parse_args(argv)
    if args.command is None:
        args = parser.parse_args(['serve'] + list(argv or []))
    return args


def run_server(args, logger) -> int:
    print("=" * 60)
    print("Ads Dashboard - Web Server")
    print("=" * 60)
    print(f"Host: {args.host}")
    print(f"Port: {args.port}")
    print(f"Mode: {'Development (Hot Reload)' if args.dev else 'Production'}")
    print("=" * 60)

    # Конфигурация uvicorn
    config = {
        "app": "ads_dashboard.interfaces.web.main:app",
        "host": args.host,
        "port": args.port,
    }

    if args.dev:
        # Development режим
        config.update({
            "reload": True,
            "log_level": "debug",
        })
    else:
        # Production режим
        config.update({
            "workers": args.workers,
            "log_level": "info",
        })

    try:
        uvicorn.run(**config)
    except KeyboardInterrupt:
        print("\nServer stopped by user")
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        return 1

    return 0


async def _compare(args, config):
    from ads_dashboard.core.row_store import create_row_store
    from ads_dashboard.services import load_comparison

    custom_range = None
    if args.since or args.until:
        custom_range = {'from': args.since, 'to': args.until}

    store = create_row_store(config)
    try:
        return await load_comparison(
            args.project_id,
            args.preset,
            custom_range,
            store=store,
            context=config.get_engine_context(),
            dense=args.dense,
        )
    finally:
        await store.close()


def run_compare(args, config, logger) -> int:
    from ads_dashboard.core.data_processor import MetricsEngineError

    try:
        comparison = asyncio.run(_compare(args, config))
    except MetricsEngineError as e:
        logger.error(f"Comparison failed: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(comparison.model_dump_json(indent=2))
    return 0 if comparison.complete else 2


def main(argv=None):
    """
    Главная функция запуска
    """
    args = parse_args(argv)

    # Валидируем конфигурацию
    try:
        config = get_config()
    except ValueError as e:
        print(f"\nERROR: Configuration validation failed!")
        print(f"Details: {e}")
        print("\nPlease check your .env file and ensure all required variables are set.")
        return 1

    # Настраиваем логирование
    setup_logging(
        level=config.get("app.log_level", "INFO"),
        console=args.command == 'serve',
        log_dir=config.get("app.log_dir"),
    )
    logger = logging.getLogger(__name__)
    logger.info(f"Config loaded: environment={config.environment}")
    logger.info(f"Row store: {config.get('row_store.backend')}")
    # НЕ логируем API ключи!

    if args.command == 'init-db':
        from ads_dashboard.storage.database import create_tables
        create_tables()
        print("Database tables created")
        return 0

    if args.command == 'compare':
        return run_compare(args, config, logger)

    return run_server(args, logger)


if __name__ == "__main__":
    sys.exit(main())
