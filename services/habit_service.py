# services/habit_service.py

"""
Привычки пользователя: добавление из библиотеки или свои, отметки выполнения,
серии и отзывы об эффективности.
"""

import uuid
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Any

from core.constants import get_library_habit
from core.models import UserHabit, HabitFeedback, ValidationError, validate_enum_value
from core.database import RecordNotFoundError
from database.manager import UserStore
from database.history import FeedbackHistory
from utils.datetime_utils import today as local_today

logger = logging.getLogger(__name__)

STREAK_TIERS = (
    (30, 'legendary'),
    (14, 'strong'),
    (7, 'steady'),
    (3, 'started'),
)

def streak_tier(streak: int) -> str:
    for threshold, name in STREAK_TIERS:
        if streak >= threshold:
            return name
    return 'new'

class HabitService:
    """Привычки одного пользователя поверх UserStore"""

    def __init__(self, store: UserStore, history: FeedbackHistory, user_id: str):
        self.store = store
        self.history = history
        self.user_id = user_id

    def _load(self) -> List[UserHabit]:
        return [UserHabit.from_dict(h) for h in self.store.get_section(self.user_id, 'habits')]

    def _save(self, habits: List[UserHabit]) -> None:
        self.store.save_section(self.user_id, 'habits', [h.to_record() for h in habits])

    def _find(self, habits: List[UserHabit], habit_id: str) -> UserHabit:
        habit = next((h for h in habits if h.id == habit_id), None)
        if habit is None:
            raise RecordNotFoundError(f"Привычка {habit_id} не найдена")
        return habit

    def list_habits(self, include_paused: bool = True) -> List[UserHabit]:
        habits = self._load()
        if not include_paused:
            habits = [h for h in habits if not h.is_paused]
        return habits

    def get_habit(self, habit_id: str) -> UserHabit:
        return self._find(self._load(), habit_id)

    def add_habit(self, library_id: Optional[str] = None, title: Optional[str] = None,
                  description: str = "", category: str = "mood", frequency: str = "daily",
                  difficulty: str = "easy", reminder_time: Optional[str] = None) -> UserHabit:
        """Добавить привычку из библиотеки (по library_id) или свою (по title)"""
        habits = self._load()

        if library_id is not None:
            template = get_library_habit(library_id)
            if template is None:
                raise ValidationError(f"Неизвестная привычка библиотеки: {library_id}")
            if any(h.source_id == library_id for h in habits):
                raise ValidationError(f"Привычка {library_id} уже добавлена")
            habit = UserHabit(
                id=uuid.uuid4().hex,
                title=template['title'],
                description=template['description'],
                category=template['category'],
                frequency=template['frequency'],
                difficulty=template['difficulty'],
                evidence_based=template['evidence_based'],
                source_id=library_id,
                reminder_time=reminder_time,
            )
        else:
            if title is None:
                raise ValidationError("Нужно указать library_id или title")
            habit = UserHabit(
                id=uuid.uuid4().hex,
                title=title,
                description=description,
                category=category,
                frequency=frequency,
                difficulty=difficulty,
                reminder_time=reminder_time,
            )

        habits.append(habit)
        self._save(habits)
        logger.info(f"➕ Habit '{habit.title}' added for user {self.user_id}")
        return habit

    def remove_habit(self, habit_id: str) -> None:
        habits = self._load()
        habit = self._find(habits, habit_id)
        self._save([h for h in habits if h.id != habit.id])
        logger.info(f"➖ Habit {habit_id} removed for user {self.user_id}")

    def _set_paused(self, habit_id: str, paused: bool) -> UserHabit:
        habits = self._load()
        habit = self._find(habits, habit_id)
        habit.is_paused = paused
        self._save(habits)
        return habit

    def pause_habit(self, habit_id: str) -> UserHabit:
        return self._set_paused(habit_id, True)

    def resume_habit(self, habit_id: str) -> UserHabit:
        return self._set_paused(habit_id, False)

    def complete_habit(self, habit_id: str, feedback: Optional[str] = None,
                       today: Optional[date] = None) -> UserHabit:
        """Отметить выполнение за сегодня; отзыв пишется и в историю"""
        today = today or local_today()
        habits = self._load()
        habit = self._find(habits, habit_id)

        if not habit.complete(today, feedback):
            logger.debug(f"Habit {habit_id} already completed on {today}")
        self._save(habits)

        if feedback is not None:
            self._record_feedback(habit_id, feedback, None)
        return habit

    def undo_habit(self, habit_id: str, today: Optional[date] = None) -> UserHabit:
        today = today or local_today()
        habits = self._load()
        habit = self._find(habits, habit_id)
        if habit.undo(today):
            self._save(habits)
            logger.info(f"↩️ Habit {habit_id} completion undone for {today}")
        return habit

    def is_habit_completed_today(self, habit_id: str, today: Optional[date] = None) -> bool:
        return self.get_habit(habit_id).is_completed_on(today or local_today())

    def view(self, habit: UserHabit, today: Optional[date] = None) -> Dict[str, Any]:
        """Привычка с сериями и уровнем серии для API"""
        view = habit.to_view(today or local_today())
        view['streakTier'] = streak_tier(view['streak'])
        return view

    def habit_views(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        today = today or local_today()
        return [self.view(habit, today) for habit in self._load()]

    # ===== FEEDBACK =====

    def _record_feedback(self, habit_id: str, feedback: str, notes: Optional[str]) -> Dict[str, Any]:
        entry = {
            'habitId': habit_id,
            'feedback': feedback,
            'notes': notes,
            'createdAt': datetime.now().isoformat(),
        }
        self.history.append_history(self.user_id, entry)
        return entry

    def save_habit_feedback(self, habit_id: str, feedback: str, notes: Optional[str] = None) -> Dict[str, Any]:
        feedback = validate_enum_value(feedback, HabitFeedback, "feedback")
        habits = self._load()
        habit = self._find(habits, habit_id)
        habit.last_feedback = feedback
        habit.last_feedback_at = datetime.now().isoformat()
        if notes is not None:
            habit.notes = notes
        self._save(habits)
        return self._record_feedback(habit_id, feedback, notes)

    def get_habit_feedback(self, habit_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.history.get_history(self.user_id, habit_id)

    def calculate_habit_effectiveness(self, habit_id: str) -> Dict[str, Any]:
        """Доля положительных отзывов, %"""
        feedback = self.get_habit_feedback(habit_id)
        total = len(feedback)
        positive = sum(1 for f in feedback if f['feedback'] == HabitFeedback.POSITIVE.value)
        return {
            'habitId': habit_id,
            'totalFeedback': total,
            'positiveFeedback': positive,
            'negativeFeedback': total - positive,
            'effectiveness': round(positive / total * 100, 1) if total else 0,
        }

    def delete_all(self) -> None:
        self.store.delete_user_data(self.user_id)
        self.history.delete_history(self.user_id)
