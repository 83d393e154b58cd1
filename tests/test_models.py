from datetime import date, datetime, timedelta

import pytest

from core.constants import get_mood_by_id, get_mood_by_value
from core.models import (
    MoodEntry, SleepEntry, IntimacyEntry, JournalEntry, AIAnalysis, UserHabit, Goal,
    ValidationError, streak_ending, longest_run_of, validate_clock
)

TODAY = date(2024, 3, 10)

class TestMoodEntry:
    def test_normalizes_date(self):
        entry = MoodEntry(mood_id=4, date=datetime(2024, 3, 1, 18, 30))
        assert entry.date == "2024-03-01"

    def test_accepts_iso_timestamp(self):
        assert MoodEntry(mood_id=4, date="2024-03-01T18:30:00+00:00").date == "2024-03-01"
        assert MoodEntry(mood_id=4, date="2024-03-01T18:30:00Z").date == "2024-03-01"

    @pytest.mark.parametrize("value", ["2024-01-01garbage", "2024-13-01", "yesterday", None, 20240101])
    def test_rejects_malformed_date(self, value):
        with pytest.raises(ValidationError):
            MoodEntry(mood_id=4, date=value)

    @pytest.mark.parametrize("mood_id", [0, 6, 2.5, True])
    def test_rejects_mood_out_of_range(self, mood_id):
        with pytest.raises(ValidationError):
            MoodEntry(mood_id=mood_id, date="2024-03-01")

    def test_rejects_long_note(self):
        with pytest.raises(ValidationError):
            MoodEntry(mood_id=3, date="2024-03-01", note="x" * 501)

    def test_blank_note_becomes_none(self):
        assert MoodEntry(mood_id=3, date="2024-03-01", note="   ").note is None

    def test_to_row_skips_server_fields(self):
        row = MoodEntry(mood_id=3, date="2024-03-01", user_id="u1").to_row()
        assert "id" not in row
        assert "created_at" not in row
        assert row["user_id"] == "u1"

    def test_to_dict_is_camel_case(self):
        data = MoodEntry(mood_id=3, date="2024-03-01").to_dict()
        assert data["moodId"] == 3
        assert "userId" in data

class TestSleepEntry:
    def test_hours_from_clock_times_over_midnight(self):
        entry = SleepEntry(date="2024-03-01", quality=4, bedtime="23:00", wake_time="07:30")
        assert entry.hours_slept == 8.5

    def test_explicit_duration_wins(self):
        entry = SleepEntry(date="2024-03-01", duration=6, bedtime="23:00", wake_time="07:30")
        assert entry.hours_slept == 6.0

    def test_rejects_bad_quality(self):
        with pytest.raises(ValidationError):
            SleepEntry(date="2024-03-01", quality=6)

    def test_rejects_bad_clock(self):
        with pytest.raises(ValidationError):
            SleepEntry(date="2024-03-01", bedtime="late")

    def test_unrated_by_default(self):
        assert SleepEntry(date="2024-03-01").quality == 0

def test_validate_clock_accepts_seconds():
    assert validate_clock("07:05:59", "wake_time") == "07:05"
    assert validate_clock("", "wake_time") is None

class TestIntimacyEntry:
    def test_mood_change(self):
        entry = IntimacyEntry(date="2024-03-01", mood_before=2, mood_after=5)
        assert entry.mood_change == 3

    def test_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            IntimacyEntry(date="2024-03-01", type="group")

def test_journal_entry_text_joins_responses():
    entry = JournalEntry(template_id="stress", responses=["Work was hard.", "Tired."])
    assert entry.text == "Work was hard. Tired."

def test_analysis_intensity_bounds():
    with pytest.raises(ValidationError):
        AIAnalysis(journal_entry_id=1, intensity=11)

class TestStreaks:
    def test_streak_ending_today(self):
        days = {TODAY, TODAY - timedelta(days=1), TODAY - timedelta(days=2)}
        assert streak_ending(days, TODAY) == 3

    def test_streak_allows_today_missing(self):
        days = {TODAY - timedelta(days=1), TODAY - timedelta(days=2)}
        assert streak_ending(days, TODAY) == 2

    def test_streak_broken(self):
        assert streak_ending({TODAY - timedelta(days=3)}, TODAY) == 0

    def test_longest_run(self):
        days = {date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 5), date(2024, 1, 6), date(2024, 1, 7)}
        assert longest_run_of(days) == 3
        assert longest_run_of(set()) == 0

class TestUserHabit:
    def make(self, **kwargs):
        return UserHabit(id="h1", title="Evening walk", **kwargs)

    def test_complete_twice_same_day(self):
        habit = self.make()
        assert habit.complete(TODAY) is True
        assert habit.complete(TODAY) is False
        assert habit.completed_dates == ["2024-03-10"]
        assert habit.current_streak(TODAY) == 1

    def test_streak_and_undo(self):
        habit = self.make(completed_dates=["2024-03-08", "2024-03-09"])
        habit.complete(TODAY)
        assert habit.current_streak(TODAY) == 3

        assert habit.undo(TODAY) is True
        assert habit.current_streak(TODAY) == 2
        assert habit.undo(TODAY) is False

    def test_feedback_is_validated(self):
        with pytest.raises(ValidationError):
            self.make().complete(TODAY, feedback="meh")

    def test_view_fields(self):
        habit = self.make(completed_dates=["2024-03-01", "2024-03-02", "2024-03-10"])
        view = habit.to_view(TODAY)
        assert view["streak"] == 1
        assert view["longestStreak"] == 2
        assert view["isCompletedToday"] is True
        assert view["lastCompleted"] == "2024-03-10"
        assert view["totalCompleted"] == 3

    def test_record_round_trip(self):
        habit = self.make(reminder_time="08:00", source_id="sleep_1")
        assert UserHabit.from_dict(habit.to_record()) == habit

    def test_short_title_rejected(self):
        with pytest.raises(ValidationError):
            UserHabit(id="h1", title="ab")

class TestGoal:
    def test_progress_and_completion(self):
        goal = Goal(id="g1", title="Run daily", target_days=3)
        assert goal.complete_day(date(2024, 3, 1))
        assert not goal.complete_day(date(2024, 3, 1))
        assert goal.progress_percent == 33.3
        assert not goal.is_completed

        goal.complete_day(date(2024, 3, 2))
        goal.complete_day(date(2024, 3, 3))
        assert goal.is_completed
        assert goal.completed_at is not None
        assert goal.progress_percent == 100.0

    def test_open_ended_goal_never_completes(self):
        goal = Goal(id="g1", title="Stay calm")
        goal.complete_day(TODAY)
        assert not goal.is_completed
        assert goal.progress_percent == 0.0

    def test_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            Goal(id="g1", title="Stay calm", type="weird")

def test_mood_lookups():
    assert get_mood_by_id(4).name == "good"
    assert get_mood_by_value(1).name == "awful"
    assert get_mood_by_value(5).emoji == "😄"
    assert get_mood_by_id(9) is None
    assert get_mood_by_value(0) is None
