"""
MoodPulse - Dashboard Dependencies
Провайдеры сервисов и идентификация пользователя для FastAPI
"""

import logging
from typing import Optional

from fastapi import Depends, Header

from core.database import NotAuthenticatedError
from core.repository import WellnessRepository
from services import (
    ServiceManager, MoodService, JournalService, HabitService,
    GoalService, AchievementService, RecommendationService
)

logger = logging.getLogger(__name__)

# ===== ГЛОБАЛЬНЫЕ ПЕРЕМЕННЫЕ =====

# Менеджер сервисов (синглтон)
_service_manager: Optional[ServiceManager] = None

# ===== ИНИЦИАЛИЗАЦИЯ =====

async def init_service_manager(manager: Optional[ServiceManager] = None,
                               with_scheduler: bool = True) -> ServiceManager:
    """Создать и инициализировать менеджер сервисов"""
    global _service_manager

    if _service_manager is None:
        logger.info("🔄 Инициализация ServiceManager...")
        _service_manager = manager or ServiceManager()
        await _service_manager.initialize(with_scheduler=with_scheduler)
        logger.info("✅ ServiceManager инициализирован")

    return _service_manager

async def close_service_manager() -> None:
    global _service_manager

    if _service_manager is not None:
        await _service_manager.close()
        _service_manager = None

# ===== DEPENDENCY PROVIDERS =====

def get_service_manager() -> ServiceManager:
    if _service_manager is None:
        raise RuntimeError("ServiceManager не инициализирован")
    return _service_manager

def get_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    """Идентификатор пользователя из заголовка X-User-Id"""
    if not x_user_id or not x_user_id.strip():
        raise NotAuthenticatedError("Заголовок X-User-Id обязателен", code="401")
    return x_user_id.strip()

def get_repository(user_id: str = Depends(get_user_id),
                   manager: ServiceManager = Depends(get_service_manager)) -> WellnessRepository:
    return manager.repository(user_id)

def get_mood_service(user_id: str = Depends(get_user_id),
                     manager: ServiceManager = Depends(get_service_manager)) -> MoodService:
    return manager.mood(user_id)

def get_journal_service(user_id: str = Depends(get_user_id),
                        manager: ServiceManager = Depends(get_service_manager)) -> JournalService:
    return manager.journal(user_id)

def get_habit_service(user_id: str = Depends(get_user_id),
                      manager: ServiceManager = Depends(get_service_manager)) -> HabitService:
    return manager.habits(user_id)

def get_goal_service(user_id: str = Depends(get_user_id),
                     manager: ServiceManager = Depends(get_service_manager)) -> GoalService:
    return manager.goals(user_id)

def get_achievement_service(user_id: str = Depends(get_user_id),
                            manager: ServiceManager = Depends(get_service_manager)) -> AchievementService:
    return manager.achievements(user_id)

def get_recommendation_service(user_id: str = Depends(get_user_id),
                               manager: ServiceManager = Depends(get_service_manager)) -> RecommendationService:
    return manager.recommendations(user_id)
