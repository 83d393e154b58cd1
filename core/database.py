#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MoodPulse - Storage Backends
Доступ к таблицам дневника: удалённый PostgREST (Supabase) или локальный JSON

Оба бэкенда реализуют одинаковый табличный интерфейс:
select / insert / update / delete с фильтрами по равенству.

Версия: 1.0.0
"""

import json
import copy
import asyncio
import threading
import time
import shutil
import gzip
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Any, Sequence, Tuple
from dataclasses import dataclass, field
from concurrent.futures import ThreadPoolExecutor
import logging

import aiohttp

from utils.decorators import retry_on_exception
from utils.datetime_utils import utc_now_iso

logger = logging.getLogger(__name__)

TABLES = (
    "mood_entries",
    "activities",
    "entry_activities",
    "intimacy_entries",
    "sleep_entries",
    "mental_clarity_tests",
    "journal_entries",
    "ai_analysis",
)

# Таблицы без колонки created_at
_NO_TIMESTAMP_TABLES = ("activities", "entry_activities")

Filters = Dict[str, Any]
Order = Sequence[Tuple[str, bool]]  # (колонка, по убыванию)

# ===== EXCEPTIONS =====

class DatabaseError(Exception):
    """Базовое исключение для ошибок базы данных"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code

class DatabaseConnectionError(DatabaseError):
    """Ошибка подключения к базе данных (временная)"""
    pass

class RecordNotFoundError(DatabaseError):
    """Запись не найдена"""
    pass

class NotAuthenticatedError(DatabaseError):
    """Операция требует идентификатор пользователя"""
    pass

# ===== HELPER CLASSES =====

@dataclass
class DatabaseStats:
    """Статистика хранилища"""
    rows_by_table: Dict[str, int] = field(default_factory=dict)
    database_size_mb: float = 0.0
    last_backup: Optional[str] = None
    last_save: Optional[str] = None
    save_count: int = 0
    load_count: int = 0
    error_count: int = 0
    uptime_seconds: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rows_by_table': dict(self.rows_by_table),
            'database_size_mb': round(self.database_size_mb, 2),
            'last_backup': self.last_backup,
            'last_save': self.last_save,
            'save_count': self.save_count,
            'load_count': self.load_count,
            'error_count': self.error_count,
            'uptime_hours': round(self.uptime_seconds / 3600, 2)
        }

class BackupManager:
    """Менеджер резервных копий"""

    def __init__(self, backup_dir: Path, max_backups: int = 10):
        self.backup_dir = Path(backup_dir)
        self.max_backups = max_backups
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def create_backup(self, source_file: Path, compressed: bool = True) -> Optional[Path]:
        """Создать резервную копию"""
        try:
            if not source_file.exists():
                logger.warning(f"Source file {source_file} does not exist for backup")
                return None

            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
            backup_name = f"backup_{timestamp}.json"

            if compressed:
                backup_path = self.backup_dir / (backup_name + ".gz")
                with open(source_file, 'rb') as f_in:
                    with gzip.open(backup_path, 'wb') as f_out:
                        shutil.copyfileobj(f_in, f_out)
            else:
                backup_path = self.backup_dir / backup_name
                shutil.copy2(source_file, backup_path)

            logger.info(f"Backup created: {backup_path}")
            self._cleanup_old_backups()
            return backup_path

        except OSError as e:
            logger.error(f"Failed to create backup: {e}")
            return None

    def restore_backup(self, backup_path: Path, target_file: Path) -> bool:
        """Восстановить из резервной копии"""
        try:
            if not backup_path.exists():
                logger.error(f"Backup file {backup_path} does not exist")
                return False

            # Копия текущего файла перед восстановлением
            if target_file.exists():
                safety_backup = target_file.with_suffix('.safety_backup.json')
                shutil.copy2(target_file, safety_backup)
                logger.info(f"Safety backup created: {safety_backup}")

            if backup_path.name.endswith('.gz'):
                with gzip.open(backup_path, 'rb') as f_in:
                    with open(target_file, 'wb') as f_out:
                        shutil.copyfileobj(f_in, f_out)
            else:
                shutil.copy2(backup_path, target_file)

            logger.info(f"Backup restored from {backup_path} to {target_file}")
            return True

        except OSError as e:
            logger.error(f"Failed to restore backup: {e}")
            return False

    def list_backups(self) -> List[Dict[str, Any]]:
        """Список резервных копий, новые первыми"""
        backups = []

        for backup_file in self.backup_dir.glob("backup_*.json*"):
            stat = backup_file.stat()
            backups.append({
                'name': backup_file.name,
                'path': str(backup_file),
                'size_mb': stat.st_size / (1024 * 1024),
                'created': datetime.fromtimestamp(stat.st_mtime).isoformat(),
                'compressed': backup_file.name.endswith('.gz')
            })

        # Имя содержит метку времени с микросекундами
        return sorted(backups, key=lambda x: x['name'], reverse=True)

    def _cleanup_old_backups(self) -> None:
        """Удалить старые резервные копии"""
        backups = sorted(self.backup_dir.glob("backup_*.json*"), key=lambda p: p.name, reverse=True)
        for backup in backups[self.max_backups:]:
            backup.unlink()
            logger.info(f"Removed old backup: {backup}")

class DatabaseMigration:
    """Миграции локального JSON документа"""

    VERSION_KEY = "__database_version__"
    SEQUENCES_KEY = "__sequences__"
    CURRENT_VERSION = "1.1"

    @classmethod
    def get_version(cls, data: Dict[str, Any]) -> str:
        return data.get(cls.VERSION_KEY, "1.0")

    @classmethod
    def needs_migration(cls, data: Dict[str, Any]) -> bool:
        return cls.get_version(data) != cls.CURRENT_VERSION

    @classmethod
    def empty(cls) -> Dict[str, Any]:
        data: Dict[str, Any] = {table: [] for table in TABLES}
        data[cls.SEQUENCES_KEY] = {table: 0 for table in TABLES}
        data[cls.VERSION_KEY] = cls.CURRENT_VERSION
        return data

    @classmethod
    def migrate(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Выполнить миграцию данных"""
        current_version = cls.get_version(data)
        logger.info(f"Migrating local database from version {current_version} to {cls.CURRENT_VERSION}")

        try:
            if current_version == "1.0":
                data = cls._migrate_from_1_0(data)

            data[cls.VERSION_KEY] = cls.CURRENT_VERSION
            logger.info("Local database migration completed successfully")
            return data

        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Local database migration failed: {e}")
            raise DatabaseError(f"Migration failed: {e}")

    @classmethod
    def _migrate_from_1_0(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """1.0: не было счётчиков id, updated_at у сна и test_type у тестов"""
        for table in TABLES:
            data.setdefault(table, [])

        sequences = data.setdefault(cls.SEQUENCES_KEY, {})
        for table in TABLES:
            max_id = max((row.get('id') or 0 for row in data[table]), default=0)
            sequences[table] = max(sequences.get(table, 0), max_id)

        for row in data['sleep_entries']:
            row.setdefault('updated_at', None)
        for row in data['mental_clarity_tests']:
            row.setdefault('test_type', 'focus')

        return data

# ===== BACKEND INTERFACE =====

class StorageBackend(ABC):
    """Табличный интерфейс хранилища"""

    name = "abstract"

    @abstractmethod
    async def select(self, table: str, filters: Optional[Filters] = None,
                     order: Optional[Order] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def insert(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def update(self, table: str, values: Dict[str, Any], filters: Filters) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def delete(self, table: str, filters: Filters) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        ...

    async def close(self) -> None:
        return None

    @staticmethod
    def _check_table(table: str) -> None:
        if table not in TABLES:
            raise DatabaseError(f"Unknown table: {table}")

# ===== LOCAL JSON BACKEND =====

class LocalBackend(StorageBackend):
    """Локальное хранилище в одном JSON файле с резервными копиями"""

    name = "local"

    def __init__(self, data_file: Path, backup_dir: Optional[Path] = None,
                 max_backups: int = 10, max_workers: int = 2):
        self.data_file = Path(data_file)
        self.backup_manager = BackupManager(backup_dir or self.data_file.parent / "backups", max_backups)
        self.file_lock = threading.RLock()
        self.write_lock = asyncio.Lock()
        self.executor = ThreadPoolExecutor(max_workers=max_workers)
        self.stats = DatabaseStats()
        self.start_time = time.time()
        self.is_shutting_down = False

        self.data_file.parent.mkdir(parents=True, exist_ok=True)
        self.data: Dict[str, Any] = self._load_sync()

    # ----- file I/O -----

    def _load_sync(self) -> Dict[str, Any]:
        """Синхронная загрузка документа"""
        if not self.data_file.exists():
            logger.info("Local database file does not exist, starting with empty database")
            self.stats.load_count += 1
            return DatabaseMigration.empty()

        try:
            with self.file_lock:
                with open(self.data_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Local database file is corrupted: {e}")
            self.stats.error_count += 1
            return self._handle_corruption()

        if DatabaseMigration.needs_migration(data):
            logger.info("Local database migration required")
            self.backup_manager.create_backup(self.data_file)
            data = DatabaseMigration.migrate(data)
            self._save_data_sync(data)

        self.stats.load_count += 1
        logger.info(f"Loaded local database {self.data_file}")
        return data

    def _handle_corruption(self) -> Dict[str, Any]:
        """Восстановление из последней рабочей резервной копии"""
        logger.warning("Attempting to recover from database corruption...")

        for backup in self.backup_manager.list_backups():
            backup_path = Path(backup['path'])
            if not self.backup_manager.restore_backup(backup_path, self.data_file):
                continue
            try:
                with open(self.data_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except json.JSONDecodeError:
                logger.warning(f"Backup {backup['name']} is corrupted as well")
                continue
            logger.info(f"Successfully restored from backup: {backup['name']}")
            if DatabaseMigration.needs_migration(data):
                data = DatabaseMigration.migrate(data)
            return data

        logger.warning("Could not restore from any backup, starting with empty database")
        return DatabaseMigration.empty()

    def _save_data_sync(self, data: Dict[str, Any]) -> None:
        """Атомарное сохранение через временный файл"""
        with self.file_lock:
            temp_file = self.data_file.with_suffix('.tmp')

            try:
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)

                # Проверяем целостность записанного файла
                with open(temp_file, 'r', encoding='utf-8') as f:
                    json.load(f)

                temp_file.replace(self.data_file)

                self.stats.save_count += 1
                self.stats.last_save = datetime.now().isoformat()

            except (OSError, ValueError):
                if temp_file.exists():
                    temp_file.unlink()
                self.stats.error_count += 1
                raise

    async def _persist(self) -> None:
        snapshot = copy.deepcopy(self.data)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(self.executor, self._save_data_sync, snapshot)
        except OSError as e:
            raise DatabaseConnectionError(f"Failed to write local database: {e}") from e

    # ----- row helpers -----

    @staticmethod
    def _matches(row: Dict[str, Any], filters: Optional[Filters]) -> bool:
        for column, expected in (filters or {}).items():
            value = row.get(column)
            if isinstance(expected, (list, tuple, set)):
                if value not in expected:
                    return False
            elif value != expected:
                return False
        return True

    @staticmethod
    def _sort(rows: List[Dict[str, Any]], order: Optional[Order]) -> List[Dict[str, Any]]:
        # Устойчивая сортировка: применяем ключи в обратном порядке
        for column, descending in reversed(list(order or [])):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=descending)
            rows = present + missing
        return rows

    # ----- table API -----

    async def select(self, table, filters=None, order=None, limit=None):
        self._check_table(table)
        rows = [dict(r) for r in self.data[table] if self._matches(r, filters)]
        rows = self._sort(rows, order)
        return rows[:limit] if limit is not None else rows

    async def insert(self, table, rows):
        self._check_table(table)
        async with self.write_lock:
            sequences = self.data[DatabaseMigration.SEQUENCES_KEY]
            inserted = []
            for row in rows:
                new_row = dict(row)
                sequences[table] = sequences.get(table, 0) + 1
                new_row['id'] = sequences[table]
                if table not in _NO_TIMESTAMP_TABLES:
                    new_row.setdefault('created_at', utc_now_iso())
                self.data[table].append(new_row)
                inserted.append(dict(new_row))
            await self._persist()
        return inserted

    async def update(self, table, values, filters):
        self._check_table(table)
        async with self.write_lock:
            updated = []
            for row in self.data[table]:
                if self._matches(row, filters):
                    row.update(values)
                    updated.append(dict(row))
            if updated:
                await self._persist()
        return updated

    async def delete(self, table, filters):
        self._check_table(table)
        async with self.write_lock:
            kept, removed = [], []
            for row in self.data[table]:
                (removed if self._matches(row, filters) else kept).append(row)
            self.data[table] = kept
            if removed:
                await self._persist()
        return removed

    # ----- maintenance -----

    async def create_backup(self, compressed: bool = True) -> Optional[Path]:
        """Сохранить текущее состояние и создать резервную копию"""
        async with self.write_lock:
            await self._persist()
            loop = asyncio.get_running_loop()
            path = await loop.run_in_executor(
                self.executor, self.backup_manager.create_backup, self.data_file, compressed
            )
        if path:
            self.stats.last_backup = datetime.now().isoformat()
        return path

    async def restore_backup(self, backup_path: Path) -> bool:
        """Восстановить документ из резервной копии и перечитать его"""
        async with self.write_lock:
            loop = asyncio.get_running_loop()
            ok = await loop.run_in_executor(
                self.executor, self.backup_manager.restore_backup, Path(backup_path), self.data_file
            )
            if ok:
                self.data = await loop.run_in_executor(self.executor, self._load_sync)
        return ok

    def get_backups(self) -> List[Dict[str, Any]]:
        return self.backup_manager.list_backups()

    def get_stats(self) -> Dict[str, Any]:
        self.stats.rows_by_table = {table: len(self.data.get(table, [])) for table in TABLES}
        self.stats.uptime_seconds = int(time.time() - self.start_time)
        if self.data_file.exists():
            self.stats.database_size_mb = self.data_file.stat().st_size / (1024 * 1024)
        return self.stats.to_dict()

    async def health_check(self) -> Dict[str, Any]:
        writable = self.data_file.parent.exists() and not self.is_shutting_down
        return {
            'backend': self.name,
            'status': 'healthy' if writable else 'unhealthy',
            'path': str(self.data_file),
            'stats': self.get_stats(),
        }

    async def close(self) -> None:
        """Финальное сохранение и остановка пула потоков"""
        if self.is_shutting_down:
            return
        self.is_shutting_down = True
        async with self.write_lock:
            await self._persist()
        self.executor.shutdown(wait=True)
        logger.info("Local database closed")

# ===== REMOTE POSTGREST BACKEND =====

class RestBackend(StorageBackend):
    """Клиент PostgREST (Supabase REST API) на aiohttp"""

    name = "rest"

    # Ответы шлюза, которые считаются временными
    TRANSIENT_STATUSES = (502, 503, 504)

    def __init__(self, url: str, anon_key: str, access_token: Optional[str] = None,
                 timeout: int = 15, max_retries: int = 3, retry_delay: float = 1.0,
                 session: Optional[aiohttp.ClientSession] = None):
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.anon_key = anon_key
        self.access_token = access_token or anon_key
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None
        self._request = retry_on_exception(
            retries=max_retries, delay=retry_delay, exceptions=(DatabaseConnectionError,)
        )(self._send)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            'apikey': self.anon_key,
            'Authorization': f"Bearer {self.access_token}",
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        if prefer:
            headers['Prefer'] = prefer
        return headers

    @staticmethod
    def _encode(value: Any) -> str:
        if isinstance(value, bool):
            return 'true' if value else 'false'
        return str(value)

    @classmethod
    def _query_params(cls, filters: Optional[Filters] = None, order: Optional[Order] = None,
                      limit: Optional[int] = None) -> Dict[str, str]:
        params: Dict[str, str] = {}
        for column, value in (filters or {}).items():
            if value is None:
                params[column] = 'is.null'
            elif isinstance(value, (list, tuple, set)):
                params[column] = f"in.({','.join(cls._encode(v) for v in value)})"
            else:
                params[column] = f"eq.{cls._encode(value)}"
        if order:
            params['order'] = ",".join(f"{col}.{'desc' if desc else 'asc'}" for col, desc in order)
        if limit is not None:
            params['limit'] = str(limit)
        return params

    def _error_from_response(self, status: int, body: str) -> DatabaseError:
        try:
            payload = json.loads(body) if body else {}
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        code = payload.get('code')
        message = payload.get('message') or body or f"HTTP {status}"

        if status in self.TRANSIENT_STATUSES:
            return DatabaseConnectionError(f"Backend unavailable ({status}): {message}", code)
        if code == 'PGRST116':
            return RecordNotFoundError(message, code)
        if status in (401, 403):
            return NotAuthenticatedError(message, code)
        return DatabaseError(f"Request failed ({status}): {message}", code)

    async def _send(self, method: str, table: str, params: Optional[Dict[str, str]] = None,
                    payload: Any = None, prefer: Optional[str] = None) -> List[Dict[str, Any]]:
        session = await self._get_session()
        url = f"{self.base_url}/{table}"
        try:
            async with session.request(method, url, params=params, json=payload,
                                       headers=self._headers(prefer)) as response:
                body = await response.text()
                if response.status >= 400:
                    raise self._error_from_response(response.status, body)
                if not body:
                    return []
                data = json.loads(body)
                return data if isinstance(data, list) else [data]
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            raise DatabaseConnectionError(f"{method} {table} failed: {e}") from e

    async def select(self, table, filters=None, order=None, limit=None):
        self._check_table(table)
        params = {'select': '*', **self._query_params(filters, order, limit)}
        return await self._request('GET', table, params=params)

    async def insert(self, table, rows):
        self._check_table(table)
        return await self._request('POST', table, payload=rows, prefer='return=representation')

    async def update(self, table, values, filters):
        self._check_table(table)
        if not filters:
            raise DatabaseError("Refusing to update without filters")
        return await self._request('PATCH', table, params=self._query_params(filters),
                                   payload=values, prefer='return=representation')

    async def delete(self, table, filters):
        self._check_table(table)
        if not filters:
            raise DatabaseError("Refusing to delete without filters")
        return await self._request('DELETE', table, params=self._query_params(filters),
                                   prefer='return=representation')

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self._send('GET', 'activities', params={'select': 'id', 'limit': '1'})
            status = 'healthy'
            error = None
        except DatabaseError as e:
            status = 'unhealthy'
            error = str(e)
        return {'backend': self.name, 'status': status, 'url': self.base_url, 'error': error}

    async def close(self) -> None:
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.info("REST backend session closed")

# ===== FACTORY =====

def create_backend(app_config=None) -> StorageBackend:
    """Выбор хранилища по конфигурации"""
    if app_config is None:
        from config import config as app_config

    if app_config.use_remote_storage:
        logger.info(f"Using REST storage backend at {app_config.supabase.url}")
        return RestBackend(
            url=app_config.supabase.url,
            anon_key=app_config.supabase.anon_key,
            timeout=app_config.supabase.timeout,
            max_retries=app_config.supabase.max_retries,
            retry_delay=app_config.supabase.retry_delay,
        )

    logger.info(f"Using local storage backend at {app_config.storage.path}")
    return LocalBackend(
        data_file=app_config.storage.path,
        backup_dir=app_config.storage.backup_dir,
        max_backups=app_config.storage.max_backups,
        max_workers=app_config.max_workers,
    )

__all__ = [
    'TABLES',
    'DatabaseError',
    'DatabaseConnectionError',
    'RecordNotFoundError',
    'NotAuthenticatedError',
    'BackupManager',
    'DatabaseMigration',
    'StorageBackend',
    'LocalBackend',
    'RestBackend',
    'create_backend',
]
