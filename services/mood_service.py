# services/mood_service.py

"""
Сервис дневника настроения: записи дня, сон, интимная активность, статистика.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Any

from core.constants import get_mood_by_id
from core.models import (
    Activity, MoodEntry, DayEntry, SleepEntry, IntimacyEntry
)
from core.repository import WellnessRepository
from services.analytics import mood_stats
from utils.datetime_utils import today_str

logger = logging.getLogger(__name__)

class MoodService:
    """Операции над записями настроения одного пользователя"""

    def __init__(self, repository: WellnessRepository):
        self.repository = repository

    async def load_data(self) -> Dict[str, Any]:
        """Справочник активностей и история записей"""
        activities, entries = await asyncio.gather(
            self.repository.get_activities(),
            self.repository.get_mood_entries(),
        )
        logger.debug(f"Loaded {len(activities)} activities and {len(entries)} mood entries")
        return {'activities': activities, 'entries': entries}

    async def add_mood_entry(self, mood_id: int, activity_ids: List[int], note: Optional[str] = None,
                             date: Optional[str] = None, sleep_quality: Optional[int] = None,
                             sleep_duration: Optional[float] = None, bedtime: Optional[str] = None,
                             wake_time: Optional[str] = None) -> MoodEntry:
        """Записать день. Существующая запись за ту же дату заменяется."""
        # Валидация до любых изменений в хранилище (заметка длиннее 500 символов отклоняется)
        entry = MoodEntry(mood_id=mood_id, date=date or today_str(), note=note)
        sleep = None
        if any(v is not None for v in (sleep_quality, sleep_duration, bedtime, wake_time)):
            sleep = SleepEntry(date=entry.date, quality=sleep_quality or 0, duration=sleep_duration,
                               bedtime=bedtime, wake_time=wake_time)

        existing = await self.repository.get_mood_entry_for_date(entry.date)
        if existing:
            logger.info(f"Replacing mood entry {existing.id} for {entry.date}")
            await self.repository.delete_mood_entry(existing.id)

        entry_id = await self.repository.insert_mood_entry(entry.mood_id, entry.date, entry.note)
        for activity_id in dict.fromkeys(activity_ids):
            await self.repository.insert_entry_activity(entry_id, activity_id)

        if sleep is not None:
            await self.repository.save_sleep_entry(sleep)

        entry.id = entry_id
        entry.user_id = self.repository.user_id
        logger.info(f"📝 Mood entry saved for {entry.date}: mood={entry.mood_id}, activities={len(activity_ids)}")
        return entry

    async def delete_mood_entry(self, entry_id: int) -> None:
        await self.repository.delete_mood_entry(entry_id)

    async def add_intimacy_entry(self, entry: IntimacyEntry) -> IntimacyEntry:
        """Записать интимную активность: одна запись на дату"""
        saved = await self.repository.save_intimacy_entry(entry)
        logger.info(f"💞 Intimacy entry saved for {saved.date}")
        return saved

    async def save_sleep_entry(self, entry: SleepEntry) -> SleepEntry:
        return await self.repository.save_sleep_entry(entry)

    async def get_entry_for_date(self, date: str) -> Optional[DayEntry]:
        entry = await self.repository.get_mood_entry_for_date(date)
        if not entry:
            return None

        mood = get_mood_by_id(entry.mood_id)
        if mood is None:
            logger.warning(f"Unknown mood id {entry.mood_id} in entry {entry.id}")
            return None

        activity_ids, activities, sleep, clarity = await asyncio.gather(
            self.repository.get_entry_activities(entry.id),
            self.repository.get_activities(),
            self.repository.get_sleep_entry_for_date(date),
            self.repository.get_mental_clarity_test_for_date(date),
        )
        by_id = {a.id: a for a in activities}

        return DayEntry(
            mood=mood,
            date=entry.date,
            activities=[by_id[i] for i in activity_ids if i in by_id],
            note=entry.note,
            sleep_quality=sleep.quality if sleep and sleep.quality else None,
            mental_clarity=clarity.score if clarity else None,
        )

    async def get_calendar_day(self, date: str) -> Dict[str, Any]:
        """Все данные за день для календаря"""
        day, sleep, clarity, intimacy = await asyncio.gather(
            self.get_entry_for_date(date),
            self.repository.get_sleep_entry_for_date(date),
            self.repository.get_mental_clarity_test_for_date(date),
            self.repository.get_intimacy_entries(),
        )
        return {
            'date': date,
            'day': day.to_dict() if day else None,
            'sleep': sleep.to_dict() if sleep else None,
            'mentalClarity': clarity.to_dict() if clarity else None,
            'intimacyActivities': [e.to_dict() for e in intimacy if e.date == date],
        }

    async def get_mood_stats(self) -> Dict[str, Any]:
        entries = await self.repository.get_mood_entries()
        return mood_stats(entries)

    async def get_activities(self) -> List[Activity]:
        return await self.repository.get_activities()

    async def get_sleep_entries(self) -> List[SleepEntry]:
        return await self.repository.get_sleep_entries()

    async def get_intimacy_entries(self) -> List[IntimacyEntry]:
        return await self.repository.get_intimacy_entries()

    async def export_data(self) -> Dict[str, Any]:
        return await self.repository.export_all_user_data()

    async def delete_all_data(self) -> Dict[str, int]:
        deleted = await self.repository.delete_all_user_data()
        logger.warning(f"🗑 All data deleted for user {self.repository.user_id}")
        return deleted
