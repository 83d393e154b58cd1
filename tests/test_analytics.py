from datetime import date, datetime

import pytest

from core.models import Activity, EntryActivity, IntimacyEntry, MoodEntry, SleepEntry
from services.analytics import (
    activity_correlations, average_sleep_last_n_days, calculate_trend, clarity_performance_level,
    consecutive_days, filter_by_time_range, format_hours, good_sleep_days, happy_streak,
    intimacy_correlations, longest_run, mood_distribution, mood_stats, mood_trend,
    normalize_clarity_score, pearson, sleep_logs_from_entries, sleep_quality_distribution, weekday_peaks
)
from utils.datetime_utils import ensure_date

TODAY = date(2024, 3, 10)

def test_mood_stats_empty():
    assert mood_stats([]) == {'totalEntries': 0, 'averageMood': 0, 'moodCounts': {}}

def test_distributions():
    entries = [MoodEntry(mood_id=m, date=f"2024-03-0{i + 1}") for i, m in enumerate([5, 5, 3])]
    assert mood_distribution(entries) == {1: 0, 2: 0, 3: 1, 4: 0, 5: 2}

    sleep = [SleepEntry(date="2024-03-01", quality=0), SleepEntry(date="2024-03-02", quality=4)]
    assert sleep_quality_distribution(sleep) == {1: 0, 2: 0, 3: 0, 4: 1, 5: 0}

def test_pearson():
    assert pearson([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
    assert pearson([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)
    assert pearson([1, 1, 1], [1, 2, 3]) == 0.0
    assert pearson([1], [1]) == 0.0

def test_filter_by_time_range():
    entries = [MoodEntry(mood_id=3, date=d) for d in ("2024-03-09", "2024-03-01", "2024-01-01")]
    assert len(filter_by_time_range(entries, "week", TODAY)) == 1
    assert len(filter_by_time_range(entries, "month", TODAY)) == 2
    assert len(filter_by_time_range(entries, "all", TODAY)) == 3
    with pytest.raises(ValueError):
        filter_by_time_range(entries, "year", TODAY)

class TestIntimacyCorrelations:
    def test_none_without_entries_in_range(self):
        old = [IntimacyEntry(date="2024-01-01")]
        assert intimacy_correlations(old, [], [], "week", TODAY) is None

    def test_summary(self):
        intimacy = [
            IntimacyEntry(date="2024-03-08", type="solo", place="bed", toys=True, orgasmed=True,
                          mood_before=2, mood_after=4),
            IntimacyEntry(date="2024-03-09", type="couple", place="sofa", mood_before=3, mood_after=3),
        ]
        sleep = [SleepEntry(date=f"2024-03-0{d}", quality=q) for d, q in ((5, 2), (6, 2), (7, 2), (8, 5), (9, 4))]
        moods = [MoodEntry(mood_id=m, date=f"2024-03-0{d}") for d, m in ((6, 2), (7, 2), (8, 5), (9, 4))]

        result = intimacy_correlations(intimacy, moods, sleep, "week", TODAY)

        assert result['totalEntries'] == 2
        assert result['frequency'] == 2.0
        assert result['avgMoodChange'] == 1.0
        assert result['avgSleepQuality'] == 4.5
        assert result['sleepCorrelation'] > 0.9
        assert result['moodCorrelation'] > 0.9
        assert result['toysMoodChange'] == 2.0
        assert result['orgasmMoodChange'] == 2.0
        assert result['soloCount'] == 1
        assert result['coupleCount'] == 1
        assert result['bestPlace'] == "bed"

def test_activity_correlations():
    entries = [MoodEntry(mood_id=5, date="2024-03-01", id=1), MoodEntry(mood_id=1, date="2024-03-02", id=2)]
    links = [EntryActivity(entry_id=1, activity_id=10), EntryActivity(entry_id=2, activity_id=20),
             EntryActivity(entry_id=99, activity_id=30)]
    activities = [Activity(name="Exercise", id=10), Activity(name="Deadline", id=20)]

    result = activity_correlations(entries, links, activities)
    assert result == [
        {'activityId': 10, 'activityName': 'Exercise', 'moodImpact': 2.0, 'frequency': 1},
        {'activityId': 20, 'activityName': 'Deadline', 'moodImpact': -2.0, 'frequency': 1},
    ]
    assert activity_correlations([], links, activities) == []

def test_sleep_logs_and_average():
    entries = [
        SleepEntry(date="2024-03-08", bedtime="23:00", wake_time="07:00"),
        SleepEntry(date="2024-03-09", bedtime="01:00", wake_time="07:00"),
        SleepEntry(date="2024-03-09", quality=3),
    ]
    logs = sleep_logs_from_entries(entries)
    assert len(logs) == 2
    assert logs[0] == (datetime(2024, 3, 8, 23, 0), datetime(2024, 3, 9, 7, 0))

    average = average_sleep_last_n_days(logs, 7, now=datetime(2024, 3, 10, 12, 0))
    assert average == pytest.approx(7.0)
    assert average_sleep_last_n_days(logs, 1, now=datetime(2024, 3, 20)) is None
    assert average_sleep_last_n_days([], 7) is None

@pytest.mark.parametrize("hours, text", [(7.5, "7h 30m"), (7.999, "8h 0m"), (0.25, "0h 15m")])
def test_format_hours(hours, text):
    assert format_hours(hours) == text

def test_good_sleep_days():
    entries = [SleepEntry(date="2024-03-01", quality=5), SleepEntry(date="2024-03-02", quality=3),
               SleepEntry(date="2024-03-03", quality=4)]
    assert good_sleep_days(entries) == 2

def test_weekday_peaks():
    result = weekday_peaks({
        'mood': [("2024-03-04", 5), ("2024-03-11", 4), ("2024-03-05", 1)],
        'sleep': [],
        'mentalClarity': [("2024-03-04", 0)],
    })
    assert result['mood']['peak'] == "Monday"
    assert result['mood']['bottom'] == "Tuesday"
    assert result['mood']['averages']['Monday'] == 4.5
    assert result['sleep'] == {'peak': None, 'bottom': None}
    assert result['mentalClarity'] == {'peak': None, 'bottom': None}

def test_calculate_trend():
    assert calculate_trend([1, 2, 3, 4, 5])['direction'] == "increasing"
    assert calculate_trend([5, 4, 3, 2, 1])['direction'] == "decreasing"
    assert calculate_trend([3, 3, 3])['direction'] == "stable"
    assert calculate_trend([3]) == {"direction": "stable", "change": 0, "change_percent": 0}

def test_mood_trend_uses_window():
    entries = [MoodEntry(mood_id=m, date=f"2024-03-0{d}") for d, m in ((1, 1), (3, 3), (5, 5))]
    entries.append(MoodEntry(mood_id=5, date="2023-01-01"))
    trend = mood_trend(entries, days=30, today=TODAY)
    assert trend['direction'] == "increasing"
    assert trend['slope'] == 2.0

def test_streak_helpers():
    dates = ["2024-03-10", "2024-03-09", "2024-03-08", "2024-03-01", "2024-03-02"]
    assert consecutive_days(dates, TODAY) == 3
    assert consecutive_days(["2024-03-09"], TODAY) == 1
    assert consecutive_days(["2024-03-05"], TODAY) == 0
    assert longest_run(dates) == 3
    assert longest_run([]) == 0

def test_happy_streak():
    entries = [MoodEntry(mood_id=m, date=f"2024-03-0{i + 1}") for i, m in enumerate([4, 5, 2, 4, 4, 5])]
    assert happy_streak(entries) == 3

@pytest.mark.parametrize("test_type, results, score", [
    ("reaction", {"score": 640}, 640),
    ("memory", {"max_level": 7}, 700),
    ("stroop", {"accuracy": 87.5}, 875),
    ("nback", {}, 500),
    ("focus", {"accuracy": 10}, 500),
])
def test_normalize_clarity_score(test_type, results, score):
    assert normalize_clarity_score(test_type, results) == score

@pytest.mark.parametrize("score, level", [(850, "Elite"), (600, "Strong"), (450, "Good"), (200, "Developing"), (50, "Building")])
def test_clarity_level(score, level):
    assert clarity_performance_level(score) == level

def test_ensure_date_rejects_trailing_junk():
    assert ensure_date("2024-03-01") == date(2024, 3, 1)
    assert ensure_date("2024-03-01T23:10:00+00:00") == date(2024, 3, 1)
    with pytest.raises(ValueError):
        ensure_date("2024-03-01garbage")
