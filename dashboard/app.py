#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MoodPulse Web API - FastAPI Application
HTTP интерфейс дневника настроения, сна, привычек и аналитики

Версия: 1.0.0
"""

import os
import time
import logging
from contextlib import asynccontextmanager
from typing import Optional

import psutil
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from config import config
from core.database import (
    DatabaseError, DatabaseConnectionError, RecordNotFoundError, NotAuthenticatedError
)
from core.models import ValidationError
from services import ServiceManager
from services.ai_service import AIServiceError
from shared.models import HealthCheck

from dashboard.dependencies import init_service_manager, close_service_manager, get_service_manager
from dashboard.api import entries, sleep, intimacy, clarity, journal, habits, insights, account

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# ===== ОБРАБОТЧИКИ ОШИБОК =====

def _error(status_code: int, exc: Exception, request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": str(exc),
            "path": str(request.url.path),
            "method": request.method,
        }
    )

async def validation_error_handler(request: Request, exc: ValidationError):
    """Неверные данные записи"""
    return _error(422, exc, request)

async def database_error_handler(request: Request, exc: DatabaseError):
    """Ошибки хранилища: отображение на HTTP статусы"""
    if isinstance(exc, NotAuthenticatedError):
        status_code = 401
    elif isinstance(exc, RecordNotFoundError):
        status_code = 404
    elif isinstance(exc, DatabaseConnectionError):
        status_code = 503
    else:
        status_code = 502

    if status_code >= 500:
        logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    return _error(status_code, exc, request)

async def ai_error_handler(request: Request, exc: AIServiceError):
    """AI провайдер недоступен, а fallback отключён"""
    logger.error(f"AI error on {request.method} {request.url.path}: {exc}")
    return _error(503, exc, request)

# ===== ПРИЛОЖЕНИЕ =====

def create_app(manager: Optional[ServiceManager] = None, with_scheduler: bool = True) -> FastAPI:
    """Фабрика приложения; manager можно передать готовым (тесты, CLI)"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Управление жизненным циклом приложения"""
        logger.info("🚀 Запуск MoodPulse API...")
        app.state.start_time = time.time()
        await init_service_manager(manager, with_scheduler=with_scheduler)
        logger.info("✅ API готово к работе")

        yield

        logger.info("🛑 Остановка API...")
        await close_service_manager()
        logger.info("✅ Ресурсы очищены")

    app = FastAPI(
        title="MoodPulse API",
        description="Дневник настроения, сна, интимной активности, ясности ума и привычек",
        version=VERSION,
        docs_url="/api/docs" if config.server.debug_mode else None,
        redoc_url="/api/redoc" if config.server.debug_mode else None,
        openapi_url="/api/openapi.json" if config.server.debug_mode else None,
        lifespan=lifespan
    )
    app.state.start_time = time.time()

    # ===== MIDDLEWARE =====

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.server.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Логирование запросов и время обработки"""
        start_time = time.time()
        client_ip = request.headers.get("X-Forwarded-For", request.client.host if request.client else "-")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} "
            f"- {response.status_code} "
            f"- {process_time:.3f}s "
            f"- {client_ip}"
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(AIServiceError, ai_error_handler)

    # ===== РОУТЕРЫ =====

    for module in (entries, sleep, intimacy, clarity, journal, habits, insights, account):
        app.include_router(module.router)

    # ===== СЛУЖЕБНЫЕ МАРШРУТЫ =====

    @app.get("/health", response_model=HealthCheck, response_model_by_alias=True)
    async def health_check():
        """Состояние хранилища, аптайм и память процесса"""
        service_manager = get_service_manager()
        health = await service_manager.health_check()
        memory_mb = psutil.Process(os.getpid()).memory_info().rss / (1024 * 1024)

        result = HealthCheck(
            status=health["status"],
            service="moodpulse",
            version=VERSION,
            timestamp=time.time(),
            uptime_seconds=int(time.time() - app.state.start_time),
            storage=health["backend"],
            memory_mb=round(memory_mb, 2),
        )
        if health["status"] != "healthy":
            return JSONResponse(status_code=503, content=result.model_dump(by_alias=True))
        return result

    @app.get("/ping")
    async def ping():
        return {"message": "pong", "timestamp": time.time(), "service": "moodpulse"}

    return app

# ===== ЗАПУСК ПРИЛОЖЕНИЯ =====

def run_dashboard(host: str = None, port: int = None, dev: bool = None):
    """Запуск API через uvicorn"""
    host = host or config.server.host
    port = port or config.server.port
    dev = dev if dev is not None else config.server.debug_mode

    logger.info(f"🌐 Запуск MoodPulse API на http://{host}:{port}")
    logger.info(f"🔧 Режим отладки: {dev}")

    try:
        uvicorn.run(
            create_app(),
            host=host,
            port=port,
            log_level="debug" if dev else "info",
            access_log=dev,
            server_header=False,
        )
    except KeyboardInterrupt:
        logger.info("👋 API остановлено")
