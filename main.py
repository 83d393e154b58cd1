#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MoodPulse - точка входа
Запуск API и служебные команды: инициализация, экспорт, резервные копии

Версия: 1.0.0
"""

import sys
import asyncio
import logging
import argparse
from pathlib import Path

from config import config
from core.database import LocalBackend, DatabaseError, create_backend
from core.repository import WellnessRepository
from services.data_export import export_user_archive
from utils.logger import setup_logging, setup_logger

logger = logging.getLogger(__name__)

# ===== КОМАНДЫ =====

def cmd_serve(args) -> int:
    from dashboard.app import run_dashboard
    run_dashboard(host=args.host, port=args.port, dev=args.dev)
    return 0

async def cmd_init_db(args) -> int:
    backend = create_backend(config)
    try:
        await WellnessRepository(backend).init_database()
        logger.info("✅ База данных инициализирована")
    finally:
        await backend.close()
    return 0

async def cmd_export(args) -> int:
    backend = create_backend(config)
    try:
        repository = WellnessRepository(backend, args.user)
        files = await export_user_archive(repository, Path(args.output or config.export_dir), args.format)
    finally:
        await backend.close()

    for path in files:
        print(path)
    return 0

def _local_backend() -> LocalBackend:
    backend = create_backend(config)
    if not isinstance(backend, LocalBackend):
        raise SystemExit("Резервные копии доступны только для локального хранилища")
    return backend

async def cmd_backup(args) -> int:
    backend = _local_backend()
    try:
        path = await backend.create_backup(compressed=not args.plain)
    finally:
        await backend.close()

    if path is None:
        logger.error("❌ Резервная копия не создана")
        return 1
    print(path)
    return 0

async def cmd_restore(args) -> int:
    backend = _local_backend()
    try:
        ok = await backend.restore_backup(Path(args.path))
    finally:
        await backend.close()

    if not ok:
        logger.error(f"❌ Не удалось восстановить {args.path}")
        return 1
    logger.info(f"✅ Восстановлено из {args.path}")
    return 0

async def cmd_list_backups(args) -> int:
    backend = _local_backend()
    try:
        backups = backend.get_backups()
    finally:
        await backend.close()

    for backup in backups:
        print(f"{backup['name']}\t{backup['size_mb']:.3f} MB\t{backup['created']}")
    if not backups:
        print("Резервных копий нет")
    return 0

# ===== ПАРСЕР =====

def _user_id(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("ID пользователя не может быть пустым")
    return value.strip()

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="moodpulse", description="MoodPulse - дневник настроения и привычек")
    parser.add_argument('--log-file', help='Дополнительно писать лог в указанный файл')
    subparsers = parser.add_subparsers(dest='command', required=True)

    serve = subparsers.add_parser('serve', help='Запустить HTTP API')
    serve.add_argument('--host', default=None, help='Host для запуска')
    serve.add_argument('--port', type=int, default=None, help='Port для запуска')
    serve.add_argument('--dev', action='store_true', default=None, help='Режим разработки')
    serve.set_defaults(handler=cmd_serve)

    init_db = subparsers.add_parser('init-db', help='Заполнить справочник активностей')
    init_db.set_defaults(handler=cmd_init_db)

    export = subparsers.add_parser('export', help='Экспорт данных пользователя')
    export.add_argument('--user', required=True, type=_user_id, help='ID пользователя')
    export.add_argument('--format', choices=('json', 'csv', 'all'), default='all')
    export.add_argument('--output', help='Каталог для файлов (по умолчанию EXPORT_DIR)')
    export.set_defaults(handler=cmd_export)

    backup = subparsers.add_parser('backup', help='Создать резервную копию')
    backup.add_argument('--plain', action='store_true', help='Без сжатия gzip')
    backup.set_defaults(handler=cmd_backup)

    restore = subparsers.add_parser('restore', help='Восстановить из резервной копии')
    restore.add_argument('path', help='Путь к файлу резервной копии')
    restore.set_defaults(handler=cmd_restore)

    list_backups = subparsers.add_parser('list-backups', help='Список резервных копий')
    list_backups.set_defaults(handler=cmd_list_backups)

    return parser

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(config)
    if args.log_file:
        setup_logger(args.log_file)

    try:
        if asyncio.iscoroutinefunction(args.handler):
            return asyncio.run(args.handler(args))
        return args.handler(args)
    except DatabaseError as e:
        logger.error(f"❌ Ошибка хранилища: {e}")
        return 1

# ===== ТОЧКА ВХОДА =====

if __name__ == "__main__":
    sys.exit(main())
