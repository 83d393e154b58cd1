# services/__init__.py

"""
Модуль сервисов MoodPulse

Содержит сервисы дневника настроения, привычек и аналитики, а также
менеджер, который создаёт общие ресурсы (хранилище, анализатор, планировщик)
и выдаёт сервисы для конкретного пользователя.
"""

import logging
from typing import Optional

from core.database import StorageBackend, create_backend
from core.repository import WellnessRepository
from database.manager import UserStore
from database.history import FeedbackHistory
from .ai_service import JournalAnalyzer
from .mood_service import MoodService
from .journal_service import JournalService
from .habit_service import HabitService
from .goals import GoalService
from .achievements import AchievementService
from .recommendations import RecommendationService
from .scheduler import create_scheduler, start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)

class ServiceManager:
    """
    Менеджер общих ресурсов и фабрика пользовательских сервисов

    Обеспечивает:
    - Инициализацию хранилища и справочника активностей
    - Запуск планировщика резервных копий
    - Корректное закрытие ресурсов
    """

    def __init__(self, app_config=None, backend: Optional[StorageBackend] = None,
                 store: Optional[UserStore] = None, history: Optional[FeedbackHistory] = None,
                 analyzer: Optional[JournalAnalyzer] = None):
        if app_config is None:
            from config import config as app_config
        self.config = app_config
        self.backend = backend or create_backend(app_config)
        self.store = store or UserStore.from_config(app_config)
        self.history = history or FeedbackHistory.from_config(app_config)
        self.analyzer = analyzer or JournalAnalyzer.from_config(app_config)
        self.scheduler = None
        self.initialized = False

    async def initialize(self, with_scheduler: bool = True) -> None:
        """Справочник активностей и планировщик бэкапов"""
        logger.info("🔧 Инициализация сервисов MoodPulse...")
        await WellnessRepository(self.backend).init_database()

        if with_scheduler:
            self.scheduler = create_scheduler(
                self.backend,
                interval_hours=self.config.storage.backup_interval_hours,
                auto_backup=self.config.storage.auto_backup,
            )
            start_scheduler(self.scheduler)

        self.initialized = True
        logger.info("✅ Все сервисы инициализированы успешно!")

    # ----- per-user services -----

    def repository(self, user_id: str) -> WellnessRepository:
        return WellnessRepository(self.backend, user_id)

    def mood(self, user_id: str) -> MoodService:
        return MoodService(self.repository(user_id))

    def journal(self, user_id: str) -> JournalService:
        return JournalService(self.repository(user_id), self.analyzer)

    def habits(self, user_id: str) -> HabitService:
        return HabitService(self.store, self.history, user_id)

    def goals(self, user_id: str) -> GoalService:
        return GoalService(self.store, user_id)

    def achievements(self, user_id: str) -> AchievementService:
        return AchievementService(self.repository(user_id), self.store, user_id)

    def recommendations(self, user_id: str) -> RecommendationService:
        return RecommendationService(self.repository(user_id))

    async def health_check(self) -> dict:
        """Проверка состояния хранилища и AI"""
        backend_health = await self.backend.health_check()
        return {
            "status": backend_health.get("status", "unknown"),
            "backend": backend_health,
            "ai": self.analyzer.stats.to_dict() | {"enabled": self.analyzer.enabled},
            "scheduler": bool(self.scheduler and self.scheduler.running),
        }

    async def close(self) -> None:
        """Закрытие в обратном порядке инициализации"""
        logger.info("🛑 Закрытие сервисов...")
        stop_scheduler(self.scheduler)
        self.scheduler = None
        await self.backend.close()
        self.initialized = False
        logger.info("✅ Все сервисы закрыты")

__all__ = [
    'ServiceManager',
    'MoodService',
    'JournalService',
    'HabitService',
    'GoalService',
    'AchievementService',
    'RecommendationService',
    'JournalAnalyzer',
]
