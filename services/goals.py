# services/goals.py

"""
Цели: готовые шаблоны, челленджи и свои цели с отметками дней.
"""

import uuid
import logging
from datetime import date
from typing import Dict, List, Optional, Any

from core.constants import PRESET_GOALS, CHALLENGE_GOALS
from core.models import Goal, ValidationError
from core.database import RecordNotFoundError
from database.manager import UserStore
from utils.datetime_utils import ensure_date, today as local_today

logger = logging.getLogger(__name__)

def find_preset(title: str) -> Optional[Dict[str, Any]]:
    return next((g for g in PRESET_GOALS + CHALLENGE_GOALS if g['title'] == title), None)

def create_goal_from_preset(title: str) -> Goal:
    preset = find_preset(title)
    if preset is None:
        raise ValidationError(f"Неизвестная цель: {title}")
    return Goal(id=uuid.uuid4().hex, **preset)

def create_custom_goal(title: str, description: str = "", target_days: Optional[int] = None,
                       category: str = "custom") -> Goal:
    return Goal(id=uuid.uuid4().hex, title=title, description=description, type="custom",
                category=category, target_days=target_days)

def complete_goal_day(goal: Goal, day: Any = None) -> bool:
    return goal.complete_day(ensure_date(day))

class GoalService:
    """Цели одного пользователя в UserStore"""

    def __init__(self, store: UserStore, user_id: str):
        self.store = store
        self.user_id = user_id

    def _load(self) -> List[Goal]:
        return [Goal.from_dict(g) for g in self.store.get_section(self.user_id, 'goals')]

    def _save(self, goals: List[Goal]) -> None:
        self.store.save_section(self.user_id, 'goals', [g.to_record() for g in goals])

    def _find(self, goals: List[Goal], goal_id: str) -> Goal:
        goal = next((g for g in goals if g.id == goal_id), None)
        if goal is None:
            raise RecordNotFoundError(f"Цель {goal_id} не найдена")
        return goal

    def list_goals(self, active_only: bool = False) -> List[Goal]:
        goals = self._load()
        return [g for g in goals if g.is_active] if active_only else goals

    def add_goal(self, goal: Goal) -> Goal:
        goals = self._load()
        goals.append(goal)
        self._save(goals)
        logger.info(f"🎯 Goal '{goal.title}' added for user {self.user_id}")
        return goal

    def add_preset(self, title: str) -> Goal:
        return self.add_goal(create_goal_from_preset(title))

    def add_custom(self, title: str, description: str = "", target_days: Optional[int] = None,
                   category: str = "custom") -> Goal:
        return self.add_goal(create_custom_goal(title, description, target_days, category))

    def complete_day(self, goal_id: str, day: Optional[date] = None) -> Goal:
        goals = self._load()
        goal = self._find(goals, goal_id)
        if complete_goal_day(goal, day or local_today()):
            self._save(goals)
            if goal.is_completed:
                logger.info(f"🏆 Goal '{goal.title}' completed by user {self.user_id}")
        return goal

    def set_active(self, goal_id: str, active: bool) -> Goal:
        goals = self._load()
        goal = self._find(goals, goal_id)
        goal.is_active = active
        self._save(goals)
        return goal

    def remove_goal(self, goal_id: str) -> None:
        goals = self._load()
        goal = self._find(goals, goal_id)
        self._save([g for g in goals if g.id != goal.id])

    def completed_count(self) -> int:
        return sum(1 for g in self._load() if g.is_completed)

    def goal_views(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        today = today or local_today()
        views = []
        for goal in self._load():
            view = goal.to_dict()
            view.update({
                'isCompleted': goal.is_completed,
                'progressPercent': goal.progress_percent,
                'streak': goal.current_streak(today),
            })
            views.append(view)
        return views
