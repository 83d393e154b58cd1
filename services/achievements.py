# services/achievements.py

"""
Достижения: пороговые проверки по статистике пользователя.

Каждое достижение связано с метрикой и порогом. Разблокированные
достижения сохраняются в UserStore и повторно не выдаются.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Any, Iterable

from core.constants import ACHIEVEMENTS
from core.repository import WellnessRepository
from database.manager import UserStore
from services.analytics import consecutive_days, good_sleep_days, happy_streak
from services.goals import GoalService

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class AchievementRule:
    """Метрика и порог для достижения"""
    metric: str
    target: int

ACHIEVEMENT_RULES: Dict[str, AchievementRule] = {
    'first_entry': AchievementRule('mood_entries', 1),
    'week_streak': AchievementRule('consecutive_days', 7),
    'month_streak': AchievementRule('consecutive_days', 30),
    'happy_week': AchievementRule('happy_streak', 7),
    'activity_explorer': AchievementRule('activities_count', 10),
    'sleep_champion': AchievementRule('good_sleep_days', 14),
    'clarity_master': AchievementRule('clarity_tests', 20),
    'goal_achiever': AchievementRule('goals_completed', 1),
    'habit_builder': AchievementRule('goals_completed', 3),
    'consistency_king': AchievementRule('consecutive_days', 100),
}

def _metrics(mood_entries: int, consecutive_days: int, activities_count: int, goals_completed: int,
             clarity_tests: int, good_sleep_days: int, happy_streak: int) -> Dict[str, int]:
    return {
        'mood_entries': mood_entries,
        'consecutive_days': consecutive_days,
        'activities_count': activities_count,
        'goals_completed': goals_completed,
        'clarity_tests': clarity_tests,
        'good_sleep_days': good_sleep_days,
        'happy_streak': happy_streak,
    }

def check_achievements(mood_entries: int, consecutive_days: int, activities_count: int,
                       goals_completed: int, clarity_tests: int, good_sleep_days: int,
                       happy_streak: int = 0, unlocked_ids: Iterable[str] = ()) -> List[Dict[str, Any]]:
    """Новые достижения, условия которых выполнены, с меткой unlockedAt"""
    metrics = _metrics(mood_entries, consecutive_days, activities_count, goals_completed,
                       clarity_tests, good_sleep_days, happy_streak)
    already = set(unlocked_ids)
    unlocked_at = datetime.now().isoformat()

    newly_unlocked = []
    for achievement in ACHIEVEMENTS:
        rule = ACHIEVEMENT_RULES[achievement['id']]
        if achievement['id'] in already:
            continue
        if metrics[rule.metric] >= rule.target:
            newly_unlocked.append({**achievement, 'isUnlocked': True, 'unlockedAt': unlocked_at})
    return newly_unlocked

def achievement_progress(metrics: Dict[str, int], unlocked: Dict[str, str]) -> List[Dict[str, Any]]:
    """Прогресс по каждому достижению: текущее значение, цель, процент"""
    progress = []
    for achievement in ACHIEVEMENTS:
        rule = ACHIEVEMENT_RULES[achievement['id']]
        current = min(metrics.get(rule.metric, 0), rule.target)
        progress.append({
            **achievement,
            'isUnlocked': achievement['id'] in unlocked,
            'unlockedAt': unlocked.get(achievement['id']),
            'progress': current,
            'target': rule.target,
            'progressPercent': round(current / rule.target * 100, 1),
        })
    return progress

class AchievementService:
    """Сбор метрик из репозитория и целей, сохранение разблокированных достижений"""

    def __init__(self, repository: WellnessRepository, store: UserStore, user_id: str):
        self.repository = repository
        self.store = store
        self.user_id = user_id

    def _unlocked(self) -> Dict[str, str]:
        return {a['id']: a['unlockedAt'] for a in self.store.get_section(self.user_id, 'achievements')}

    async def collect_metrics(self, today: Optional[date] = None) -> Dict[str, int]:
        moods, links, clarity, sleep = await asyncio.gather(
            self.repository.get_mood_entries(),
            self.repository.get_all_entry_activities(),
            self.repository.get_mental_clarity_tests(),
            self.repository.get_sleep_entries(),
        )
        return _metrics(
            mood_entries=len(moods),
            consecutive_days=consecutive_days({e.date for e in moods}, today),
            activities_count=len({link.activity_id for link in links}),
            goals_completed=GoalService(self.store, self.user_id).completed_count(),
            clarity_tests=len(clarity),
            good_sleep_days=good_sleep_days(sleep),
            happy_streak=happy_streak(moods),
        )

    async def refresh(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """Проверить достижения и сохранить новые; возвращает только новые"""
        return self._unlock(await self.collect_metrics(today))

    def _unlock(self, metrics: Dict[str, int]) -> List[Dict[str, Any]]:
        stored = self.store.get_section(self.user_id, 'achievements')
        newly_unlocked = check_achievements(**metrics, unlocked_ids=[a['id'] for a in stored])

        if newly_unlocked:
            stored.extend({'id': a['id'], 'unlockedAt': a['unlockedAt']} for a in newly_unlocked)
            self.store.save_section(self.user_id, 'achievements', stored)
            logger.info(f"🏅 User {self.user_id} unlocked: {[a['id'] for a in newly_unlocked]}")
        return newly_unlocked

    async def overview(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        metrics = await self.collect_metrics(today)
        self._unlock(metrics)
        return achievement_progress(metrics, self._unlocked())
