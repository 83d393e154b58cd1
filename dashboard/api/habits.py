from fastapi import APIRouter, Depends, Query, status
from typing import List, Dict, Any, Optional

from core.constants import HABIT_LIBRARY, HABIT_CATEGORIES, PRESET_GOALS, CHALLENGE_GOALS
from core.models import ValidationError
from services.goals import GoalService
from services.habit_service import HabitService
from services.recommendations import (
    RecommendationService, get_habit_library, get_habits_by_category
)
from shared.models import HabitCreate, HabitComplete, HabitFeedbackCreate, GoalCreate, GoalDayComplete
from utils.datetime_utils import ensure_date

from ..dependencies import get_habit_service, get_goal_service, get_recommendation_service

router = APIRouter(prefix="/api/habits", tags=["habits"])

# ===== БИБЛИОТЕКА И РЕКОМЕНДАЦИИ =====

@router.get("/library", response_model=List[Dict[str, Any]])
async def habit_library(category: Optional[str] = None):
    """Библиотека привычек, которые можно добавить"""
    if category is None:
        return HABIT_LIBRARY
    return [h for h in HABIT_LIBRARY if h['category'] == category]

@router.get("/library/categories", response_model=List[str])
async def habit_categories():
    return HABIT_CATEGORIES

@router.get("/suggestions", response_model=List[Dict[str, Any]])
async def smart_suggestions(service: RecommendationService = Depends(get_recommendation_service)):
    return await service.smart_suggestions()

@router.get("/suggestions/library", response_model=List[Dict[str, Any]])
async def suggestion_library(category: Optional[str] = None):
    return get_habit_library() if category is None else get_habits_by_category(category)

@router.get("/personalized", response_model=List[Dict[str, Any]])
async def personalized(service: RecommendationService = Depends(get_recommendation_service)):
    return await service.personalized_habits()

# ===== ЦЕЛИ =====

@router.get("/goals", response_model=List[Dict[str, Any]])
async def list_goals(service: GoalService = Depends(get_goal_service)):
    return service.goal_views()

@router.get("/goals/presets", response_model=Dict[str, List[Dict[str, Any]]])
async def goal_presets():
    return {'presets': PRESET_GOALS, 'challenges': CHALLENGE_GOALS}

@router.post("/goals", status_code=status.HTTP_201_CREATED, response_model=Dict[str, Any])
async def create_goal(payload: GoalCreate, service: GoalService = Depends(get_goal_service)):
    if payload.preset_title:
        goal = service.add_preset(payload.preset_title)
    elif payload.title:
        goal = service.add_custom(payload.title, payload.description, payload.target_days, payload.category)
    else:
        raise ValidationError("Нужно указать presetTitle или title")
    return goal.to_dict()

@router.post("/goals/{goal_id}/complete", response_model=Dict[str, Any])
async def complete_goal_day(goal_id: str, payload: Optional[GoalDayComplete] = None,
                            service: GoalService = Depends(get_goal_service)):
    day = ensure_date(payload.date) if payload and payload.date else None
    goal = service.complete_day(goal_id, day)
    return goal.to_dict() | {'isCompleted': goal.is_completed, 'progressPercent': goal.progress_percent}

@router.delete("/goals/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(goal_id: str, service: GoalService = Depends(get_goal_service)):
    service.remove_goal(goal_id)

# ===== ПРИВЫЧКИ ПОЛЬЗОВАТЕЛЯ =====

@router.get("", response_model=List[Dict[str, Any]])
async def list_habits(include_paused: bool = Query(True, alias="includePaused"),
                      service: HabitService = Depends(get_habit_service)):
    views = service.habit_views()
    if not include_paused:
        views = [v for v in views if not v['isPaused']]
    return views

@router.post("", status_code=status.HTTP_201_CREATED, response_model=Dict[str, Any])
async def add_habit(payload: HabitCreate, service: HabitService = Depends(get_habit_service)):
    habit = service.add_habit(
        library_id=payload.library_id,
        title=payload.title,
        description=payload.description,
        category=payload.category,
        frequency=payload.frequency,
        difficulty=payload.difficulty,
        reminder_time=payload.reminder_time,
    )
    return service.view(habit)

@router.delete("/{habit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_habit(habit_id: str, service: HabitService = Depends(get_habit_service)):
    service.remove_habit(habit_id)

@router.post("/{habit_id}/complete", response_model=Dict[str, Any])
async def complete_habit(habit_id: str, payload: Optional[HabitComplete] = None,
                         service: HabitService = Depends(get_habit_service)):
    feedback = payload.feedback.value if payload and payload.feedback else None
    return service.view(service.complete_habit(habit_id, feedback))

@router.post("/{habit_id}/undo", response_model=Dict[str, Any])
async def undo_habit(habit_id: str, service: HabitService = Depends(get_habit_service)):
    return service.view(service.undo_habit(habit_id))

@router.post("/{habit_id}/pause", response_model=Dict[str, Any])
async def pause_habit(habit_id: str, service: HabitService = Depends(get_habit_service)):
    return service.view(service.pause_habit(habit_id))

@router.post("/{habit_id}/resume", response_model=Dict[str, Any])
async def resume_habit(habit_id: str, service: HabitService = Depends(get_habit_service)):
    return service.view(service.resume_habit(habit_id))

@router.post("/{habit_id}/feedback", status_code=status.HTTP_201_CREATED, response_model=Dict[str, Any])
async def save_feedback(habit_id: str, payload: HabitFeedbackCreate,
                        service: HabitService = Depends(get_habit_service)):
    return service.save_habit_feedback(habit_id, payload.feedback.value, payload.notes)

@router.get("/{habit_id}/feedback", response_model=List[Dict[str, Any]])
async def list_feedback(habit_id: str, service: HabitService = Depends(get_habit_service)):
    return service.get_habit_feedback(habit_id)

@router.get("/{habit_id}/effectiveness", response_model=Dict[str, Any])
async def effectiveness(habit_id: str, service: HabitService = Depends(get_habit_service)):
    return service.calculate_habit_effectiveness(habit_id)
