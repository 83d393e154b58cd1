# services/journal_service.py

"""
Дневник по шаблонам: поиск триггеров и эвристический анализ текста.
"""

import logging
from typing import Dict, List, Optional, Any

from core.constants import TRIGGERS, JOURNAL_TEMPLATES, POSITIVE_WORDS, NEGATIVE_WORDS
from core.models import JournalEntry, AIAnalysis, Sentiment, ValidationError
from core.repository import WellnessRepository

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION = 'Keep journaling regularly to track your emotional patterns.'

def get_template(template_id: str) -> Optional[Dict[str, Any]]:
    return next((t for t in JOURNAL_TEMPLATES if t['id'] == template_id), None)

def detect_triggers(responses: List[str]) -> List[str]:
    """Названия триггеров, ключевые слова которых встречаются в ответах"""
    combined = " ".join(responses).lower()
    return [
        trigger['name']
        for trigger in TRIGGERS
        if any(keyword.lower() in combined for keyword in trigger['keywords'])
    ]

def analyze_text(text: str) -> Dict[str, Any]:
    """Эвристический анализ: тональность, паттерны, интенсивность 1-10, советы"""
    lower = text.lower()

    positive_count = sum(1 for word in POSITIVE_WORDS if word in lower)
    negative_count = sum(1 for word in NEGATIVE_WORDS if word in lower)

    if positive_count > negative_count:
        sentiment = Sentiment.POSITIVE.value
    elif negative_count > positive_count:
        sentiment = Sentiment.NEGATIVE.value
    else:
        sentiment = Sentiment.NEUTRAL.value

    work_stress = 'work' in lower and ('stress' in lower or 'overwhelm' in lower)

    patterns = []
    if 'meeting' in lower and ('anxious' in lower or 'nervous' in lower):
        patterns.append('You often feel anxious after meetings.')
    if work_stress:
        patterns.append('Work seems to be a major source of stress for you.')
    if 'wednesday' in lower or 'mid-week' in lower:
        patterns.append('Your stress seems highest mid-week.')
    if 'sleep' in lower and ('poor' in lower or 'bad' in lower):
        patterns.append('Sleep quality appears to impact your mood.')

    exclamations = text.count('!')
    intensity = min(10, max(1, 3 + exclamations + (positive_count + negative_count) // 2))

    suggestions = []
    if sentiment == Sentiment.NEGATIVE.value:
        suggestions.append('Try this CBT exercise to reframe negative thoughts.')
    if any('mid-week' in p for p in patterns):
        suggestions.append('Consider a short meditation break on Wednesdays.')
    if 'sleep' in lower or 'tired' in lower:
        suggestions.append('Try a bedtime breathing exercise to improve sleep quality.')
    if work_stress:
        suggestions.append('Consider setting boundaries between work and personal time.')
    if not suggestions:
        suggestions.append(DEFAULT_SUGGESTION)

    return {
        'sentiment': sentiment,
        'patterns': patterns,
        'intensity': intensity,
        'suggestions': suggestions,
    }

class JournalService:
    """Сохранение записей дневника и их анализ"""

    def __init__(self, repository: WellnessRepository, analyzer=None):
        self.repository = repository
        self.analyzer = analyzer

    async def save_entry(self, template_id: str, responses: List[str]) -> JournalEntry:
        if get_template(template_id) is None:
            raise ValidationError(f"Неизвестный шаблон дневника: {template_id}")

        entry = JournalEntry(template_id=template_id, responses=responses,
                             triggers=detect_triggers(responses))
        saved = await self.repository.insert_journal_entry(entry)
        logger.info(f"📓 Journal entry {saved.id} saved, triggers: {saved.triggers}")
        return saved

    async def analyze_entry(self, entry_id: int) -> Optional[AIAnalysis]:
        """Проанализировать запись и сохранить результат; None если записи нет"""
        entry = await self.repository.get_journal_entry_by_id(entry_id)
        if entry is None:
            return None

        if self.analyzer is not None:
            result = await self.analyzer.analyze(entry.text)
        else:
            result = analyze_text(entry.text)

        analysis = AIAnalysis(journal_entry_id=entry.id, **result)
        return await self.repository.insert_ai_analysis(analysis)

    async def get_entries(self) -> List[JournalEntry]:
        return await self.repository.get_journal_entries()

    async def get_entry(self, entry_id: int) -> Optional[JournalEntry]:
        return await self.repository.get_journal_entry_by_id(entry_id)

    async def get_analysis(self, entry_id: int) -> Optional[AIAnalysis]:
        return await self.repository.get_ai_analysis_for_entry(entry_id)

    async def get_all_analysis(self) -> List[AIAnalysis]:
        return await self.repository.get_all_ai_analysis()

    async def trigger_summary(self) -> Dict[str, int]:
        """Сколько раз встречался каждый триггер во всех записях"""
        counts: Dict[str, int] = {}
        for entry in await self.repository.get_journal_entries():
            for name in entry.triggers:
                counts[name] = counts.get(name, 0) + 1
        return dict(sorted(counts.items(), key=lambda item: -item[1]))
