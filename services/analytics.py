# services/analytics.py

"""
Аналитика дневника: статистика настроения, корреляции, сон, ясность ума.

Все функции чистые: принимают списки моделей и опорную дату,
ничего не читают из хранилища.
"""

import math
import logging
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Any, Iterable, Sequence, Tuple

import pandas as pd

from core.models import (
    MoodEntry, SleepEntry, IntimacyEntry, EntryActivity, Activity, TimeRange,
    streak_ending, longest_run_of
)
from utils.datetime_utils import ensure_date

logger = logging.getLogger(__name__)

WEEKS_IN_RANGE = {
    TimeRange.WEEK.value: 1,
    TimeRange.MONTH.value: 4,
    TimeRange.ALL.value: 52,
}

GOOD_SLEEP_THRESHOLD = 4
HAPPY_MOOD_THRESHOLD = 4

# ===== MOOD =====

def mood_stats(entries: Sequence[MoodEntry]) -> Dict[str, Any]:
    """Всего записей, среднее настроение и частоты по mood_id"""
    if not entries:
        return {'totalEntries': 0, 'averageMood': 0, 'moodCounts': {}}

    counts = Counter(e.mood_id for e in entries)
    average = sum(e.mood_id for e in entries) / len(entries)
    return {
        'totalEntries': len(entries),
        'averageMood': round(average, 2),
        'moodCounts': dict(sorted(counts.items())),
    }

def mood_distribution(entries: Sequence[MoodEntry]) -> Dict[int, int]:
    distribution = {value: 0 for value in range(1, 6)}
    for entry in entries:
        distribution[entry.mood_id] += 1
    return distribution

def sleep_quality_distribution(entries: Sequence[SleepEntry]) -> Dict[int, int]:
    """Распределение оценок сна 1-5; записи без оценки пропускаются"""
    distribution = {value: 0 for value in range(1, 6)}
    for entry in entries:
        if entry.quality:
            distribution[entry.quality] += 1
    return distribution

def filter_by_time_range(items: Iterable[Any], time_range: str, today: Optional[date] = None) -> List[Any]:
    """Записи за неделю (7 дней), месяц (30 дней) или за всё время"""
    time_range = TimeRange(time_range).value
    items = list(items)
    if time_range == TimeRange.ALL.value:
        return items

    today = ensure_date(today)
    days = 7 if time_range == TimeRange.WEEK.value else 30
    start = today - timedelta(days=days)
    return [item for item in items if start <= ensure_date(item.date) <= today]

# ===== CORRELATIONS =====

def pearson(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Коэффициент Пирсона; 0 при менее чем двух парах или нулевой дисперсии"""
    n = min(len(xs), len(ys))
    if n < 2:
        return 0.0

    xs, ys = list(xs)[:n], list(ys)[:n]
    mean_x = sum(xs) / n
    mean_y = sum(ys) / n

    numerator = sum((x - mean_x) * (y - mean_y) for x, y in zip(xs, ys))
    denom_x = sum((x - mean_x) ** 2 for x in xs)
    denom_y = sum((y - mean_y) ** 2 for y in ys)
    denominator = math.sqrt(denom_x * denom_y)

    if denominator == 0:
        return 0.0
    return numerator / denominator

def _average(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0

def intimacy_correlations(intimacy: Sequence[IntimacyEntry], moods: Sequence[MoodEntry],
                          sleep: Sequence[SleepEntry], time_range: str = TimeRange.MONTH.value,
                          today: Optional[date] = None) -> Optional[Dict[str, Any]]:
    """Связь интимной активности со сном и настроением за период.

    Корреляция считается по дням, где есть оценка сна (или настроения):
    x = 1 в дни с интимной активностью, иначе 0; y = оценка дня.
    Возвращает None, если в периоде нет записей интимной активности.
    """
    in_range = filter_by_time_range(intimacy, time_range, today)
    if not in_range:
        return None

    intimacy_dates = {e.date for e in in_range}
    sleep_in_range = [s for s in filter_by_time_range(sleep, time_range, today) if s.quality]
    moods_in_range = filter_by_time_range(moods, time_range, today)

    sleep_on_intimacy_days = [s.quality for s in sleep_in_range if s.date in intimacy_dates]

    sleep_pairs = [(1.0 if s.date in intimacy_dates else 0.0, float(s.quality)) for s in sleep_in_range]
    mood_pairs = [(1.0 if m.date in intimacy_dates else 0.0, float(m.mood_id)) for m in moods_in_range]

    with_toys = [e.mood_change for e in in_range if e.toys]
    with_orgasm = [e.mood_change for e in in_range if e.orgasmed]

    places = Counter(e.place for e in in_range if e.place)
    best_place = None
    if places:
        by_place = defaultdict(list)
        for e in in_range:
            if e.place:
                by_place[e.place].append(e.mood_change)
        best_place = max(by_place, key=lambda p: (_average(by_place[p]), places[p]))

    return {
        'timeRange': time_range,
        'totalEntries': len(in_range),
        'frequency': round(len(in_range) / WEEKS_IN_RANGE[time_range], 2),
        'avgMoodChange': round(_average([e.mood_change for e in in_range]), 2),
        'avgSleepQuality': round(_average(sleep_on_intimacy_days), 2),
        'sleepCorrelation': round(pearson([p[0] for p in sleep_pairs], [p[1] for p in sleep_pairs]), 3),
        'moodCorrelation': round(pearson([p[0] for p in mood_pairs], [p[1] for p in mood_pairs]), 3),
        'toysMoodChange': round(_average(with_toys), 2),
        'orgasmMoodChange': round(_average(with_orgasm), 2),
        'soloCount': sum(1 for e in in_range if e.type == 'solo'),
        'coupleCount': sum(1 for e in in_range if e.type == 'couple'),
        'bestPlace': best_place,
    }

def activity_correlations(entries: Sequence[MoodEntry], links: Sequence[EntryActivity],
                          activities: Sequence[Activity]) -> List[Dict[str, Any]]:
    """Влияние активности на настроение: среднее в дни с активностью минус общее среднее"""
    if not entries:
        return []

    mood_by_entry = {e.id: e.mood_id for e in entries}
    overall = _average(list(mood_by_entry.values()))
    by_activity: Dict[int, List[int]] = defaultdict(list)
    for link in links:
        if link.entry_id in mood_by_entry:
            by_activity[link.activity_id].append(mood_by_entry[link.entry_id])

    names = {a.id: a.name for a in activities}
    result = [
        {
            'activityId': activity_id,
            'activityName': names.get(activity_id, str(activity_id)),
            'moodImpact': round(_average(values) - overall, 2),
            'frequency': len(values),
        }
        for activity_id, values in by_activity.items()
    ]
    return sorted(result, key=lambda r: (-r['moodImpact'], -r['frequency']))

# ===== SLEEP =====

def sleep_logs_from_entries(entries: Sequence[SleepEntry]) -> List[Tuple[datetime, datetime]]:
    """Интервалы сна из bedtime/wake_time; подъём раньше отбоя переносится на следующий день"""
    logs = []
    for entry in entries:
        if not entry.bedtime or not entry.wake_time:
            continue
        day = ensure_date(entry.date)
        start = datetime.combine(day, datetime.strptime(entry.bedtime, "%H:%M").time())
        end = datetime.combine(day, datetime.strptime(entry.wake_time, "%H:%M").time())
        if end < start:
            end += timedelta(days=1)
        logs.append((start, end))
    return logs

def average_sleep_last_n_days(logs: Sequence[Tuple[datetime, datetime]], days: int = 7,
                              now: Optional[datetime] = None) -> Optional[float]:
    """Средняя длительность сна (часы) по интервалам, закончившимся за последние N дней"""
    if not logs:
        return None

    now = now or datetime.now()
    window_start = now - timedelta(days=days)

    durations = []
    for start, end in logs:
        if not window_start <= end <= now:
            continue
        if end < start:
            end += timedelta(hours=24)
        durations.append((end - start).total_seconds() / 3600)

    if not durations:
        return None
    return sum(durations) / len(durations)

def format_hours(hours: float) -> str:
    whole = int(hours)
    minutes = int(round((hours - whole) * 60))
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return f"{whole}h {minutes}m"

def good_sleep_days(entries: Sequence[SleepEntry], threshold: int = GOOD_SLEEP_THRESHOLD) -> int:
    return len({e.date for e in entries if e.quality >= threshold})

# ===== WEEKDAYS & TRENDS =====

def weekday_peaks(series: Dict[str, Sequence[Tuple[str, float]]]) -> Dict[str, Dict[str, Optional[str]]]:
    """Лучший и худший день недели для каждой метрики.

    series: {"mood": [(date, value), ...], "sleep": [...], ...}
    Дни недели со средним 0 не учитываются.
    """
    result = {}
    for metric, points in series.items():
        frame = pd.DataFrame(list(points), columns=['date', 'value'])
        if frame.empty:
            result[metric] = {'peak': None, 'bottom': None}
            continue

        frame['weekday'] = pd.to_datetime(frame['date']).dt.day_name()
        means = frame.groupby('weekday')['value'].mean()
        means = means[means > 0]
        if means.empty:
            result[metric] = {'peak': None, 'bottom': None}
            continue

        result[metric] = {
            'peak': str(means.idxmax()),
            'bottom': str(means.idxmin()),
            'averages': {day: round(float(value), 2) for day, value in means.items()},
        }
    return result

def calculate_trend(values: List[float]) -> Dict[str, Any]:
    """Вычислить тренд для списка значений (наклон линейной регрессии)"""
    if len(values) < 2:
        return {"direction": "stable", "change": 0, "change_percent": 0}

    n = len(values)
    x_values = list(range(n))

    sum_x = sum(x_values)
    sum_y = sum(values)
    sum_xy = sum(x * y for x, y in zip(x_values, values))
    sum_x2 = sum(x * x for x in x_values)

    denominator = n * sum_x2 - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator else 0

    first_half_avg = sum(values[:n // 2]) / max(n // 2, 1)
    second_half_avg = sum(values[n // 2:]) / max(n - n // 2, 1)

    change = second_half_avg - first_half_avg
    change_percent = (change / first_half_avg * 100) if first_half_avg else 0

    if abs(slope) < 0.05:
        direction = "stable"
    elif slope > 0:
        direction = "increasing"
    else:
        direction = "decreasing"

    return {
        "direction": direction,
        "slope": round(slope, 3),
        "change": round(change, 2),
        "change_percent": round(change_percent, 2),
    }

def mood_trend(entries: Sequence[MoodEntry], days: int = 30, today: Optional[date] = None) -> Dict[str, Any]:
    today = ensure_date(today)
    start = today - timedelta(days=days)
    recent = sorted((e for e in entries if start <= ensure_date(e.date) <= today), key=lambda e: e.date)
    return calculate_trend([float(e.mood_id) for e in recent])

# ===== STREAKS =====

def consecutive_days(dates: Iterable[Any], today: Optional[date] = None) -> int:
    """Текущая серия подряд идущих дней, заканчивающаяся сегодня или вчера"""
    return streak_ending({ensure_date(d) for d in dates}, ensure_date(today))

def longest_run(dates: Iterable[Any]) -> int:
    """Самая длинная серия подряд идущих дней"""
    return longest_run_of({ensure_date(d) for d in dates})

def happy_streak(entries: Sequence[MoodEntry], threshold: int = HAPPY_MOOD_THRESHOLD) -> int:
    """Самая длинная серия дней с настроением не ниже порога"""
    return longest_run(e.date for e in entries if e.mood_id >= threshold)

# ===== MENTAL CLARITY =====

CLARITY_LEVELS = (
    (800, "Elite"),
    (600, "Strong"),
    (400, "Good"),
    (200, "Developing"),
)

def normalize_clarity_score(test_type: str, results: Optional[Dict[str, Any]] = None) -> int:
    """Привести результат теста к общей шкале (примерно 0-1000)"""
    results = results or {}
    if test_type == 'reaction':
        return int(results.get('score', 500))
    if test_type == 'memory':
        return int(results.get('max_level', 3)) * 100
    if test_type in ('flexibility', 'stroop', 'nback'):
        return round(float(results.get('accuracy', 50)) * 10)
    return 500

def clarity_performance_level(score: float) -> str:
    for threshold, label in CLARITY_LEVELS:
        if score >= threshold:
            return label
    return "Building"
