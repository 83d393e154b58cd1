#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MoodPulse - Wellness Repository
Операции над таблицами дневника для одного пользователя

Политика ошибок едина для всех операций:
чтение логирует ошибку и возвращает пустой результат,
запись логирует ошибку и пробрасывает её дальше.

Версия: 1.0.0
"""

import asyncio
import logging
from typing import Dict, List, Optional, Any

from core.constants import DEFAULT_ACTIVITIES
from core.database import StorageBackend, NotAuthenticatedError, DatabaseError, RecordNotFoundError
from core.models import (
    Activity, MoodEntry, EntryActivity, SleepEntry, IntimacyEntry,
    MentalClarityTest, JournalEntry, AIAnalysis
)
from utils.decorators import log_and_default, log_and_raise
from utils.datetime_utils import today_str, utc_now_iso

logger = logging.getLogger(__name__)

# Порядок важен: сначала зависимые строки
DELETE_ORDER = (
    "entry_activities",
    "mood_entries",
    "intimacy_entries",
    "sleep_entries",
    "mental_clarity_tests",
    "ai_analysis",
    "journal_entries",
)

class WellnessRepository:
    """Репозиторий записей пользователя поверх StorageBackend"""

    def __init__(self, backend: StorageBackend, user_id: Optional[str] = None):
        self.backend = backend
        self.user_id = user_id

    def set_user_id(self, user_id: Optional[str]) -> None:
        self.user_id = user_id

    def _require_user(self) -> str:
        if not self.user_id:
            raise NotAuthenticatedError("User not authenticated")
        return self.user_id

    def _scope(self, **filters) -> Dict[str, Any]:
        return {'user_id': self._require_user(), **filters}

    async def _insert_one(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        rows = await self.backend.insert(table, [row])
        if not rows:
            raise DatabaseError(f"Insert into {table} returned no rows")
        return rows[0]

    async def _find_for_date(self, table: str, date: str) -> Optional[Dict[str, Any]]:
        rows = await self.backend.select(table, self._scope(date=date),
                                         order=[('created_at', True)], limit=1)
        return rows[0] if rows else None

    async def _upsert_for_date(self, table: str, row: Dict[str, Any],
                               touch_updated_at: bool = False) -> Dict[str, Any]:
        """Одна строка на пользователя и дату: обновить существующую или вставить новую"""
        existing = await self._find_for_date(table, row['date'])
        row = {**row, 'user_id': self._require_user()}
        if existing:
            if touch_updated_at:
                row['updated_at'] = utc_now_iso()
            updated = await self.backend.update(table, row, self._scope(id=existing['id']))
            return updated[0] if updated else {**existing, **row}
        return await self._insert_one(table, row)

    # ===== INITIALIZATION =====

    async def init_database(self) -> None:
        """Заполнить справочник активностей, если он пуст"""
        try:
            existing = await self.backend.select('activities', limit=1)
            if existing:
                return
            await self.backend.insert('activities', [dict(a) for a in DEFAULT_ACTIVITIES])
            logger.info(f"Seeded {len(DEFAULT_ACTIVITIES)} default activities")
        except DatabaseError as e:
            logger.error(f"Error initializing database: {e}")

    # ===== MOOD ENTRIES =====

    @log_and_raise
    async def insert_mood_entry(self, mood_id: int, date: str, note: Optional[str] = None) -> int:
        entry = MoodEntry(mood_id=mood_id, date=date, note=note, user_id=self._require_user())
        row = await self._insert_one('mood_entries', entry.to_row())
        return row['id']

    @log_and_raise
    async def insert_entry_activity(self, entry_id: int, activity_id: int) -> None:
        self._require_user()
        link = EntryActivity(entry_id=entry_id, activity_id=activity_id)
        await self.backend.insert('entry_activities', [link.to_row()])

    @log_and_default(list)
    async def get_mood_entries(self) -> List[MoodEntry]:
        rows = await self.backend.select('mood_entries', self._scope(), order=[('date', True)])
        return [MoodEntry.from_row(r) for r in rows]

    @log_and_default(list)
    async def get_activities(self) -> List[Activity]:
        rows = await self.backend.select('activities', order=[('category', False), ('name', False)])
        return [Activity.from_row(r) for r in rows]

    async def _owned_entry(self, entry_id: int) -> Optional[Dict[str, Any]]:
        rows = await self.backend.select('mood_entries', self._scope(id=entry_id), limit=1)
        return rows[0] if rows else None

    @log_and_default(list)
    async def get_entry_activities(self, entry_id: int) -> List[int]:
        # У связей нет user_id: доступ только к связям своих записей
        if await self._owned_entry(entry_id) is None:
            return []
        rows = await self.backend.select('entry_activities', {'entry_id': entry_id})
        return [r['activity_id'] for r in rows]

    @log_and_default(list)
    async def get_all_entry_activities(self) -> List[EntryActivity]:
        """Связи активностей для всех записей пользователя"""
        entry_ids = [e['id'] for e in await self.backend.select('mood_entries', self._scope())]
        if not entry_ids:
            return []
        rows = await self.backend.select('entry_activities', {'entry_id': entry_ids})
        return [EntryActivity.from_row(r) for r in rows]

    @log_and_default(lambda: None)
    async def get_mood_entry_for_date(self, date: str) -> Optional[MoodEntry]:
        row = await self._find_for_date('mood_entries', date)
        return MoodEntry.from_row(row) if row else None

    @log_and_raise
    async def delete_mood_entry(self, entry_id: int) -> None:
        if await self._owned_entry(entry_id) is None:
            raise RecordNotFoundError(f"Mood entry {entry_id} not found")
        try:
            await self.backend.delete('entry_activities', {'entry_id': entry_id})
        except DatabaseError as e:
            logger.error(f"Error deleting entry activities for {entry_id}: {e}")
        await self.backend.delete('mood_entries', self._scope(id=entry_id))

    # ===== MENTAL CLARITY =====

    @log_and_raise
    async def insert_mental_clarity_test(self, score: float, reaction_times: List[float],
                                         accuracy: float, duration: int,
                                         test_type: str = 'focus') -> int:
        test = MentalClarityTest(
            score=score,
            date=today_str(),
            test_type=test_type,
            duration=duration,
            reaction_times=reaction_times,
            average_reaction_time=MentalClarityTest.mean_reaction_time(reaction_times),
            accuracy=accuracy,
            user_id=self._require_user(),
        )
        row = await self._insert_one('mental_clarity_tests', test.to_row())
        return row['id']

    @log_and_default(list)
    async def get_mental_clarity_tests(self) -> List[MentalClarityTest]:
        rows = await self.backend.select('mental_clarity_tests', self._scope(),
                                         order=[('created_at', True)])
        return [MentalClarityTest.from_row(r) for r in rows]

    @log_and_default(lambda: None)
    async def get_mental_clarity_test_for_date(self, date: str) -> Optional[MentalClarityTest]:
        row = await self._find_for_date('mental_clarity_tests', date)
        return MentalClarityTest.from_row(row) if row else None

    # ===== INTIMACY =====

    @log_and_raise
    async def insert_intimacy_entry(self, entry: IntimacyEntry) -> int:
        row = {**entry.to_row(), 'user_id': self._require_user()}
        inserted = await self._insert_one('intimacy_entries', row)
        return inserted['id']

    @log_and_default(list)
    async def get_intimacy_entries(self) -> List[IntimacyEntry]:
        rows = await self.backend.select('intimacy_entries', self._scope(), order=[('date', True)])
        return [IntimacyEntry.from_row(r) for r in rows]

    @log_and_default(lambda: None)
    async def get_intimacy_entry_for_date(self, date: str) -> Optional[IntimacyEntry]:
        row = await self._find_for_date('intimacy_entries', date)
        return IntimacyEntry.from_row(row) if row else None

    @log_and_raise
    async def update_intimacy_entry(self, entry_id: int, entry: IntimacyEntry) -> None:
        values = {k: v for k, v in entry.to_row().items() if k != 'user_id'}
        await self.backend.update('intimacy_entries', values, self._scope(id=entry_id))

    @log_and_raise
    async def save_intimacy_entry(self, entry: IntimacyEntry) -> IntimacyEntry:
        """Вставить или обновить запись за дату"""
        row = await self._upsert_for_date('intimacy_entries', entry.to_row())
        return IntimacyEntry.from_row(row)

    @log_and_raise
    async def delete_intimacy_entry(self, entry_id: int) -> None:
        await self.backend.delete('intimacy_entries', self._scope(id=entry_id))

    # ===== SLEEP =====

    @log_and_raise
    async def save_sleep_entry(self, entry: SleepEntry) -> SleepEntry:
        row = await self._upsert_for_date('sleep_entries', entry.to_row(), touch_updated_at=True)
        return SleepEntry.from_row(row)

    @log_and_default(lambda: None)
    async def get_sleep_entry_for_date(self, date: str) -> Optional[SleepEntry]:
        row = await self._find_for_date('sleep_entries', date)
        return SleepEntry.from_row(row) if row else None

    @log_and_default(list)
    async def get_sleep_entries(self) -> List[SleepEntry]:
        rows = await self.backend.select('sleep_entries', self._scope(), order=[('date', True)])
        return [SleepEntry.from_row(r) for r in rows]

    # ===== JOURNAL =====

    @log_and_raise
    async def insert_journal_entry(self, entry: JournalEntry) -> JournalEntry:
        row = await self._insert_one('journal_entries', {**entry.to_row(), 'user_id': self._require_user()})
        return JournalEntry.from_row(row)

    @log_and_default(list)
    async def get_journal_entries(self) -> List[JournalEntry]:
        rows = await self.backend.select('journal_entries', self._scope(), order=[('created_at', True)])
        return [JournalEntry.from_row(r) for r in rows]

    @log_and_default(lambda: None)
    async def get_journal_entry_by_id(self, entry_id: int) -> Optional[JournalEntry]:
        rows = await self.backend.select('journal_entries', self._scope(id=entry_id), limit=1)
        return JournalEntry.from_row(rows[0]) if rows else None

    # ===== AI ANALYSIS =====

    @log_and_raise
    async def insert_ai_analysis(self, analysis: AIAnalysis) -> AIAnalysis:
        row = await self._insert_one('ai_analysis', {**analysis.to_row(), 'user_id': self._require_user()})
        return AIAnalysis.from_row(row)

    @log_and_default(lambda: None)
    async def get_ai_analysis_for_entry(self, journal_entry_id: int) -> Optional[AIAnalysis]:
        rows = await self.backend.select('ai_analysis', self._scope(journal_entry_id=journal_entry_id),
                                         order=[('created_at', True)], limit=1)
        return AIAnalysis.from_row(rows[0]) if rows else None

    @log_and_default(list)
    async def get_all_ai_analysis(self) -> List[AIAnalysis]:
        rows = await self.backend.select('ai_analysis', self._scope(), order=[('created_at', True)])
        return [AIAnalysis.from_row(r) for r in rows]

    # ===== ACCOUNT =====

    @log_and_raise
    async def export_all_user_data(self) -> Dict[str, Any]:
        user_id = self._require_user()
        (moods, activities, intimacy, sleep, clarity, journal, analysis) = await asyncio.gather(
            self.get_mood_entries(),
            self.get_activities(),
            self.get_intimacy_entries(),
            self.get_sleep_entries(),
            self.get_mental_clarity_tests(),
            self.get_journal_entries(),
            self.get_all_ai_analysis(),
        )
        return {
            'exportedAt': utc_now_iso(),
            'userId': user_id,
            'moodEntries': [m.to_dict() for m in moods],
            'activities': [a.to_dict() for a in activities],
            'intimacyEntries': [i.to_dict() for i in intimacy],
            'sleepEntries': [s.to_dict() for s in sleep],
            'mentalClarityTests': [c.to_dict() for c in clarity],
            'journalEntries': [j.to_dict() for j in journal],
            'aiAnalysis': [a.to_dict() for a in analysis],
        }

    @log_and_raise
    async def delete_all_user_data(self) -> Dict[str, int]:
        """Удалить все записи пользователя; возвращает число удалённых строк по таблицам"""
        scope = self._scope()
        deleted: Dict[str, int] = {}
        for table in DELETE_ORDER:
            if table == 'entry_activities':
                # У связей нет user_id: удаляем по id записей пользователя
                entry_ids = [r['id'] for r in await self.backend.select('mood_entries', scope)]
                removed = await self.backend.delete(table, {'entry_id': entry_ids}) if entry_ids else []
            else:
                removed = await self.backend.delete(table, scope)
            deleted[table] = len(removed)
        logger.info(f"Deleted all data for user {scope['user_id']}: {deleted}")
        return deleted
