# services/recommendations.py

"""
Рекомендации привычек по данным пользователя: сон, настроение, интимная активность.
"""

import logging
from datetime import date, timedelta
from typing import Dict, List, Optional, Any, Sequence

from core.models import MoodEntry, SleepEntry, IntimacyEntry
from core.repository import WellnessRepository
from utils.datetime_utils import ensure_date

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5
RECENT_ENTRIES = 7
INTIMACY_WINDOW_DAYS = 14
LOW_MOOD = 2
GENERAL_REASON = 'General wellness habit for balanced lifestyle'
GENERAL_CATEGORIES = ('mentalClarity', 'health')

def _suggestion(id: str, title: str, description: str, category: str, reason: str) -> Dict[str, str]:
    return {'id': id, 'title': title, 'description': description, 'category': category, 'reason': reason}

def _library(id: str, title: str, description: str, category: str, benefits: str) -> Dict[str, str]:
    return {'id': id, 'title': title, 'description': description, 'category': category, 'benefits': benefits}

HABIT_SUGGESTION_LIBRARY: List[Dict[str, str]] = [
    _library('sleep-1', 'Stretch 5 mins before bed', 'Improve sleep quality with gentle stretching',
             'sleep', 'Reduces muscle tension and promotes relaxation'),
    _library('sleep-2', 'No screens 30 mins before sleep', 'Reduce blue light exposure before sleep',
             'sleep', 'Improves melatonin production for better sleep'),
    _library('sleep-3', 'Set bedtime routine', 'Create a consistent wind-down routine',
             'sleep', 'Trains your body to recognize sleep time'),
    _library('mood-1', '3-min gratitude journaling', "Write down 3 things you're grateful for",
             'mood', 'Shifts focus to positive aspects of life'),
    _library('mood-2', 'Midday walk', 'Take a 10-minute walk during lunch',
             'mood', 'Boosts mood and energy levels'),
    _library('mood-3', 'Positive self-talk', 'Replace negative thoughts with positive affirmations',
             'mood', 'Builds self-confidence and resilience'),
    _library('anxiety-1', 'Box breathing exercise', '4-4-4-4 breathing technique',
             'anxiety', 'Activates parasympathetic nervous system'),
    _library('anxiety-2', '5-min meditation', 'Focus on breath and let thoughts pass',
             'anxiety', 'Reduces stress and promotes calm'),
    _library('anxiety-3', 'Progressive muscle relaxation', 'Tense and release muscle groups',
             'anxiety', 'Reduces physical tension and anxiety'),
    _library('clarity-1', 'Morning brain dump', 'Write down all thoughts to clear your mind',
             'mentalClarity', 'Improves focus and reduces mental clutter'),
    _library('clarity-2', 'Digital detox hour', 'One hour without screens or notifications',
             'mentalClarity', 'Reduces cognitive overload'),
    _library('clarity-3', 'Mind mapping', 'Visualize thoughts and ideas',
             'mentalClarity', 'Enhances creative thinking and problem-solving'),
    _library('intimacy-1', 'Schedule couple time', 'Dedicate uninterrupted time to connect',
             'intimacy', 'Strengthens emotional bond and communication'),
    _library('intimacy-2', 'Solo self-care routine', 'Prioritize your own physical and emotional needs',
             'intimacy', 'Builds self-love and confidence'),
    _library('intimacy-3', 'Express appreciation', 'Tell your partner something you appreciate daily',
             'intimacy', 'Increases feelings of connection and satisfaction'),
]

SLEEP_SUGGESTIONS = [
    _suggestion('smart-sleep-1', 'Deep breathing before bed', '5 minutes of diaphragmatic breathing',
                'sleep', 'Your sleep quality has been below average this week'),
    _suggestion('smart-sleep-2', 'Cooler bedroom temperature', 'Set room temperature to 65-68°F',
                'sleep', 'Optimal temperature improves sleep quality'),
    _suggestion('smart-sleep-3', 'No screens 30 mins before sleep', 'Reduce blue light exposure before sleep',
                'sleep', 'Screen time before bed disrupts melatonin production'),
]

MOOD_SUGGESTIONS = [
    _suggestion('smart-mood-1', 'Gratitude reflection', 'List 3 positive moments from your day',
                'mood', 'Mood tracking shows patterns of lower energy'),
    _suggestion('smart-mood-2', '3-min mindfulness meditation', 'Focus on breath and let thoughts pass',
                'mood', 'Mindfulness helps regulate emotional responses'),
]

ANXIETY_SUGGESTION = _suggestion('smart-anxiety-1', 'Box breathing exercise', '4-4-4-4 breathing technique',
                                 'anxiety', 'Breathing exercises reduce anxiety and stress')

INTIMACY_SUGGESTION = _suggestion('smart-intimacy-1', 'Schedule intimate time',
                                  'Dedicate 30 minutes this week for connection',
                                  'intimacy', 'Regular intimacy supports emotional wellbeing')

FALLBACK_SUGGESTIONS: List[Dict[str, str]] = [
    _suggestion('fallback-1', 'Mindful breathing', 'Take 5 deep breaths when feeling stressed',
                'mindfulness', 'General stress management technique'),
    _suggestion('fallback-2', 'Hydration check', 'Drink a glass of water every 2 hours',
                'health', 'Staying hydrated supports overall wellbeing'),
    _suggestion('fallback-3', 'Evening reflection', 'Spend 5 minutes reviewing your day',
                'mindfulness', 'Reflection helps process daily experiences'),
    _suggestion('fallback-4', 'Morning stretch', '5 minutes of gentle stretching',
                'health', 'Improves flexibility and circulation'),
    _suggestion('fallback-5', 'Digital detox hour', 'One hour without screens or notifications',
                'mentalClarity', 'Reduces cognitive overload and eye strain'),
]

def _most_recent(items: Sequence[Any], n: int) -> List[Any]:
    return sorted(items, key=lambda item: item.date)[-n:]

def generate_smart_suggestions(mood_entries: Sequence[MoodEntry], sleep_entries: Sequence[SleepEntry],
                               intimacy_entries: Sequence[IntimacyEntry],
                               today: Optional[date] = None) -> List[Dict[str, str]]:
    """До пяти предложений: сначала по данным пользователя, затем общие"""
    today = ensure_date(today)
    suggestions: List[Dict[str, str]] = []

    rated_sleep = [s for s in sleep_entries if s.quality]
    if rated_sleep:
        recent_sleep = _most_recent(rated_sleep, RECENT_ENTRIES)
        avg_quality = sum(s.quality for s in recent_sleep) / len(recent_sleep)
        if avg_quality < 3:
            suggestions.extend(SLEEP_SUGGESTIONS)

    if mood_entries:
        recent_moods = _most_recent(mood_entries, RECENT_ENTRIES)
        counts: Dict[int, int] = {}
        for entry in recent_moods:
            counts[entry.mood_id] = counts.get(entry.mood_id, 0) + 1

        if any(mood_id <= LOW_MOOD and count >= 3 for mood_id, count in counts.items()):
            suggestions.extend(MOOD_SUGGESTIONS)

        if sum(1 for e in recent_moods if e.mood_id <= LOW_MOOD) >= 3:
            suggestions.append(ANXIETY_SUGGESTION)

    if intimacy_entries:
        window_start = today - timedelta(days=INTIMACY_WINDOW_DAYS)
        recent_count = sum(1 for e in intimacy_entries if window_start <= ensure_date(e.date) <= today)
        if recent_count < 3:
            suggestions.append(INTIMACY_SUGGESTION)

    # Общие привычки библиотеки, затем базовые рекомендации без повторов названий
    general = [h for h in HABIT_SUGGESTION_LIBRARY if h['category'] in GENERAL_CATEGORIES]
    general += FALLBACK_SUGGESTIONS
    used_titles = {s['title'] for s in suggestions}
    for habit in general:
        if len(suggestions) >= MAX_SUGGESTIONS:
            break
        if habit['title'] in used_titles:
            continue
        used_titles.add(habit['title'])
        suggestions.append({
            'id': f"general-{len(suggestions)}-{habit['id']}",
            'title': habit['title'],
            'description': habit['description'],
            'category': habit['category'],
            'reason': GENERAL_REASON,
        })

    return suggestions[:MAX_SUGGESTIONS]

def get_habit_library() -> List[Dict[str, str]]:
    return list(HABIT_SUGGESTION_LIBRARY)

def get_habits_by_category(category: str) -> List[Dict[str, str]]:
    return [h for h in HABIT_SUGGESTION_LIBRARY if h['category'] == category]

def get_personalized_habits(mood_entries: Sequence[MoodEntry]) -> List[Dict[str, str]]:
    """Библиотека, отсортированная по совпадению категорий с последними настроениями"""
    boosts: Dict[str, int] = {}
    for entry in _most_recent(mood_entries, RECENT_ENTRIES):
        if entry.mood_id <= LOW_MOOD:
            boosts['mood'] = boosts.get('mood', 0) + 1
        elif entry.mood_id >= 4:
            boosts['sleep'] = boosts.get('sleep', 0) + 1

    return sorted(HABIT_SUGGESTION_LIBRARY, key=lambda h: -boosts.get(h['category'], 0))

class RecommendationService:
    """Рекомендации по данным из репозитория"""

    def __init__(self, repository: WellnessRepository):
        self.repository = repository

    async def smart_suggestions(self, today: Optional[date] = None) -> List[Dict[str, str]]:
        try:
            moods = await self.repository.get_mood_entries()
            sleep = await self.repository.get_sleep_entries()
            intimacy = await self.repository.get_intimacy_entries()
            return generate_smart_suggestions(moods, sleep, intimacy, today)
        except Exception as e:
            logger.error(f"Ошибка генерации рекомендаций: {e}")
            return list(FALLBACK_SUGGESTIONS)

    async def personalized_habits(self) -> List[Dict[str, str]]:
        return get_personalized_habits(await self.repository.get_mood_entries())
