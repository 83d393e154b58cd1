#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MoodPulse - Configuration
Централизованная конфигурация с валидацией

Версия: 1.0.0
"""

import os
import sys
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass
from enum import Enum

class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

class StorageBackendType(Enum):
    """Тип хранилища"""
    AUTO = "auto"
    REST = "rest"
    LOCAL = "local"

@dataclass
class StorageConfig:
    """Конфигурация локального хранилища"""
    path: Path
    backup_dir: Path
    habits_dir: Path
    backend: StorageBackendType = StorageBackendType.AUTO
    backup_interval_hours: int = 6
    max_backups: int = 10
    auto_backup: bool = True

@dataclass
class SupabaseConfig:
    """Конфигурация удалённого REST хранилища (PostgREST)"""
    url: Optional[str] = None
    anon_key: Optional[str] = None
    timeout: int = 15
    max_retries: int = 3
    retry_delay: float = 1.0

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)

@dataclass
class AIConfig:
    """Конфигурация AI анализа дневника"""
    openai_api_key: Optional[str]
    openai_model: str = "gpt-4o-mini"
    openai_max_tokens: int = 600
    fallback_enabled: bool = True
    request_timeout: int = 30

@dataclass
class ServerConfig:
    """Конфигурация HTTP сервера"""
    host: str = "0.0.0.0"
    port: int = 8080
    debug_mode: bool = False
    allowed_origins: tuple = ("*",)

class AppConfig:
    """Главный класс конфигурации"""

    def __init__(self):
        self.environment = Environment(os.getenv('ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()
        self._ensure_directories()

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""

        # Директории
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.export_dir = Path(os.getenv('EXPORT_DIR', 'exports'))
        self.backup_dir = Path(os.getenv('BACKUP_DIR', 'backups'))
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        # Хранилище
        self.storage = StorageConfig(
            path=self.data_dir / "wellness_data.json",
            backup_dir=self.backup_dir,
            habits_dir=self.data_dir / "habits",
            backend=StorageBackendType(os.getenv('STORAGE_BACKEND', 'auto').lower()),
            backup_interval_hours=int(os.getenv('BACKUP_INTERVAL_HOURS', 6)),
            max_backups=int(os.getenv('MAX_BACKUPS', 10)),
            auto_backup=os.getenv('AUTO_BACKUP', 'true').lower() == 'true'
        )

        self.supabase = SupabaseConfig(
            url=(os.getenv('SUPABASE_URL') or '').rstrip('/') or None,
            anon_key=os.getenv('SUPABASE_ANON_KEY') or None,
            timeout=int(os.getenv('SUPABASE_TIMEOUT', 15)),
            max_retries=int(os.getenv('SUPABASE_MAX_RETRIES', 3))
        )

        # AI конфигурация
        self.ai = AIConfig(
            openai_api_key=os.getenv('OPENAI_API_KEY') or None,
            openai_model=os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
            openai_max_tokens=int(os.getenv('OPENAI_MAX_TOKENS', 600)),
            fallback_enabled=os.getenv('AI_FALLBACK_ENABLED', 'true').lower() == 'true',
            request_timeout=int(os.getenv('AI_TIMEOUT', 30))
        )

        # Сервер
        origins = os.getenv('ALLOWED_ORIGINS', '*')
        self.server = ServerConfig(
            host=os.getenv('HOST', '0.0.0.0'),
            port=int(os.getenv('PORT', 8080)),
            debug_mode=os.getenv('DEBUG_MODE', 'false').lower() == 'true',
            allowed_origins=tuple(o.strip() for o in origins.split(',') if o.strip())
        )

        # Логирование
        self.log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper())
        self.log_to_file = os.getenv('LOG_TO_FILE', 'true').lower() == 'true'
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

        # Время: даты записей считаются в этой зоне
        self.timezone = os.getenv('TIMEZONE', 'UTC')

        # Производительность
        self.max_workers = int(os.getenv('MAX_WORKERS', 4))

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = []

        if self.storage.backend == StorageBackendType.REST and not self.supabase.is_configured:
            errors.append("STORAGE_BACKEND=rest требует SUPABASE_URL и SUPABASE_ANON_KEY")

        if self.supabase.url and not self.supabase.url.startswith(('http://', 'https://')):
            errors.append(f"SUPABASE_URL имеет неверный формат: {self.supabase.url}")

        if not 1 <= self.server.port <= 65535:
            errors.append(f"Порт {self.server.port} вне допустимого диапазона (1-65535)")

        if self.storage.max_backups < 1:
            errors.append("MAX_BACKUPS должен быть положительным числом")

        if self.supabase.anon_key and not self.supabase.url:
            logging.warning("⚠️ SUPABASE_ANON_KEY задан без SUPABASE_URL - используется локальное хранилище")

        if errors:
            raise ValueError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))

    def _ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [
            self.data_dir,
            self.export_dir,
            self.backup_dir,
            self.log_dir
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    @property
    def use_remote_storage(self) -> bool:
        """Используется ли удалённое REST хранилище"""
        if self.storage.backend == StorageBackendType.LOCAL:
            return False
        return self.supabase.is_configured

    def get_logging_config(self) -> Dict[str, Any]:
        """Получение конфигурации логирования"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        quiet = {
            name: {'level': 'WARNING', 'handlers': handlers, 'propagate': False}
            for name in ('aiohttp.access', 'uvicorn.access', 'httpx', 'openai', 'apscheduler')
        }

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.log_level.value,
                    'formatter': 'default',
                    'stream': sys.stdout
                },
                'file': {
                    'class': 'logging.handlers.RotatingFileHandler',
                    'level': self.log_level.value,
                    'formatter': 'default',
                    'filename': str(self.log_dir / f"moodpulse_{self.environment.value}.log"),
                    'maxBytes': 10485760,  # 10MB
                    'backupCount': 5,
                    'encoding': 'utf-8'
                }
            },
            'loggers': {
                '': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                **quiet
            }
        }

    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация конфигурации в словарь (без секретов)"""
        return {
            'environment': self.environment.value,
            'storage': {
                'backend': 'rest' if self.use_remote_storage else 'local',
                'path': str(self.storage.path),
                'auto_backup': self.storage.auto_backup
            },
            'supabase_url': self.supabase.url,
            'server': {
                'host': self.server.host,
                'port': self.server.port,
                'debug_mode': self.server.debug_mode
            },
            'ai_enabled': bool(self.ai.openai_api_key),
            'timezone': self.timezone,
            'log_level': self.log_level.value
        }

# Глобальный экземпляр конфигурации
config = AppConfig()
