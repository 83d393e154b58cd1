#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MoodPulse - Core Data Models
Модели записей дневника с валидацией и преобразованием строк таблиц

Каждая модель соответствует строке удалённой таблицы (snake_case колонки).
to_dict() отдаёт camelCase представление для HTTP API и экспорта.

Версия: 1.0.0
"""

from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Any, Type, TypeVar
from dataclasses import dataclass, field, asdict, fields
from enum import Enum
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="RowModel")

# ===== ENUMS =====

class IntimacyType(Enum):
    """Тип интимной активности"""
    SOLO = "solo"
    COUPLE = "couple"

class Sentiment(Enum):
    """Тональность записи дневника"""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"

class ClarityTestType(Enum):
    """Типы тестов ясности ума"""
    FOCUS = "focus"
    MEMORY = "memory"
    PROCESSING = "processing"
    REACTION = "reaction"
    FLEXIBILITY = "flexibility"
    STROOP = "stroop"
    NBACK = "nback"

class HabitFeedback(Enum):
    """Отзыв о привычке"""
    POSITIVE = "positive"
    NEGATIVE = "negative"

class TimeRange(Enum):
    """Период для аналитики"""
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass

def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Валидация текстовых полей"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} должен быть строкой")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} должен содержать минимум {min_length} символов")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} должен содержать максимум {max_length} символов")

    return text

def validate_enum_value(value: str, enum_class: type, field_name: str = "value") -> str:
    """Валидация значений enum"""
    try:
        enum_class(value)
        return value
    except ValueError:
        valid_values = [e.value for e in enum_class]
        raise ValidationError(f"{field_name} должен быть одним из: {valid_values}")

def validate_date(value: Any, field_name: str = "date") -> str:
    """Дата в формате YYYY-MM-DD; принимает date/datetime"""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValidationError(f"Неверный формат даты в {field_name}: {value}")
    try:
        if len(value) == 10:
            return date.fromisoformat(value).isoformat()
        # Полная метка времени ISO (например, из created_at)
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        raise ValidationError(f"Неверный формат даты в {field_name}: {value}")

def validate_int_range(value: Any, low: int, high: int, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ValidationError(f"{field_name} должен быть целым числом")
    value = int(value)
    if not low <= value <= high:
        raise ValidationError(f"{field_name} должен быть от {low} до {high}")
    return value

def validate_clock(value: Optional[str], field_name: str) -> Optional[str]:
    """Время суток HH:MM"""
    if value is None or value == "":
        return None
    try:
        return datetime.strptime(str(value)[:5], "%H:%M").strftime("%H:%M")
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} должен быть в формате HH:MM")

def to_camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)

# ===== BASE =====

class RowModel:
    """Общие преобразования строка таблицы <-> модель"""

    # Поля, которые заполняет сервер и не отправляются при вставке
    SERVER_FIELDS = ("id", "created_at", "updated_at")

    @classmethod
    def from_row(cls: Type[T], row: Dict[str, Any]) -> T:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in row.items() if k in known})

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        for key in self.SERVER_FIELDS:
            if row.get(key) is None:
                row.pop(key, None)
        return row

    def to_dict(self) -> Dict[str, Any]:
        return {to_camel(k): v for k, v in asdict(self).items()}

# ===== MODELS =====

@dataclass
class Mood:
    """Настроение из справочника (1-5)"""
    id: int
    name: str
    color: str
    value: int
    emoji: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass
class Activity(RowModel):
    """Тег активности"""
    name: str
    icon: str = "circle"
    category: str = "Other"
    is_good: bool = True
    id: Optional[int] = None

    def __post_init__(self):
        self.name = validate_text(self.name, min_length=1, max_length=100, field_name="name")
        self.category = validate_text(self.category, min_length=1, max_length=50, field_name="category")
        self.is_good = bool(self.is_good)

@dataclass
class MoodEntry(RowModel):
    """Запись настроения за день"""
    mood_id: int
    date: str
    note: Optional[str] = None
    id: Optional[int] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    NOTE_MAX_LENGTH = 500

    def __post_init__(self):
        self.mood_id = validate_int_range(self.mood_id, 1, 5, "mood_id")
        self.date = validate_date(self.date)
        if self.note is not None:
            self.note = validate_text(self.note, min_length=0, max_length=self.NOTE_MAX_LENGTH,
                                      field_name="note") or None

@dataclass
class EntryActivity(RowModel):
    """Связь записи настроения с активностью"""
    entry_id: int
    activity_id: int
    id: Optional[int] = None

@dataclass
class SleepEntry(RowModel):
    """Запись сна; quality 0 означает «без оценки»"""
    date: str
    quality: int = 0
    duration: Optional[float] = None
    bedtime: Optional[str] = None
    wake_time: Optional[str] = None
    id: Optional[int] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        self.date = validate_date(self.date)
        self.quality = validate_int_range(self.quality or 0, 0, 5, "quality")
        if self.duration is not None:
            if not isinstance(self.duration, (int, float)) or not 0 <= self.duration <= 24:
                raise ValidationError("duration должен быть от 0 до 24 часов")
        self.bedtime = validate_clock(self.bedtime, "bedtime")
        self.wake_time = validate_clock(self.wake_time, "wake_time")

    @property
    def hours_slept(self) -> Optional[float]:
        """Длительность сна: явная или вычисленная по bedtime/wake_time"""
        if self.duration is not None:
            return float(self.duration)
        if self.bedtime and self.wake_time:
            bed = datetime.strptime(self.bedtime, "%H:%M")
            wake = datetime.strptime(self.wake_time, "%H:%M")
            minutes = (wake - bed).total_seconds() / 60
            if minutes < 0:
                minutes += 24 * 60
            return round(minutes / 60, 2)
        return None

@dataclass
class IntimacyEntry(RowModel):
    """Запись интимной активности"""
    date: str
    type: str = IntimacyType.SOLO.value
    orgasmed: bool = False
    place: str = ""
    toys: bool = False
    time_to_sleep: int = 0
    mood_before: int = 3
    mood_after: int = 3
    id: Optional[int] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    def __post_init__(self):
        self.date = validate_date(self.date)
        self.type = validate_enum_value(self.type, IntimacyType, "type")
        self.place = validate_text(self.place or "", min_length=0, max_length=100, field_name="place")
        self.orgasmed = bool(self.orgasmed)
        self.toys = bool(self.toys)
        self.time_to_sleep = validate_int_range(self.time_to_sleep or 0, 0, 24 * 60, "time_to_sleep")
        self.mood_before = validate_int_range(self.mood_before, 1, 5, "mood_before")
        self.mood_after = validate_int_range(self.mood_after, 1, 5, "mood_after")

    @property
    def mood_change(self) -> int:
        return self.mood_after - self.mood_before

@dataclass
class MentalClarityTest(RowModel):
    """Результат теста ясности ума"""
    score: float
    date: str
    test_type: str = ClarityTestType.FOCUS.value
    duration: int = 0
    reaction_times: List[float] = field(default_factory=list)
    average_reaction_time: float = 0
    accuracy: float = 0
    id: Optional[int] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    def __post_init__(self):
        self.date = validate_date(self.date)
        self.test_type = validate_enum_value(self.test_type, ClarityTestType, "test_type")
        if not isinstance(self.score, (int, float)) or self.score < 0:
            raise ValidationError("score должен быть неотрицательным числом")
        if self.duration is None or self.duration < 0:
            raise ValidationError("duration должен быть неотрицательным")
        self.reaction_times = list(self.reaction_times or [])

    @staticmethod
    def mean_reaction_time(reaction_times: List[float]) -> int:
        if not reaction_times:
            return 0
        return round(sum(reaction_times) / len(reaction_times))

@dataclass
class JournalEntry(RowModel):
    """Запись дневника по шаблону"""
    template_id: str
    responses: List[str] = field(default_factory=list)
    triggers: List[str] = field(default_factory=list)
    id: Optional[int] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    def __post_init__(self):
        self.template_id = validate_text(self.template_id, min_length=1, max_length=50, field_name="template_id")
        if not isinstance(self.responses, list):
            raise ValidationError("responses должен быть списком")
        self.responses = [validate_text(r, min_length=0, max_length=5000, field_name="response")
                          for r in self.responses]
        self.triggers = list(self.triggers or [])

    @property
    def text(self) -> str:
        return " ".join(self.responses)

@dataclass
class AIAnalysis(RowModel):
    """Результат анализа записи дневника"""
    journal_entry_id: int
    sentiment: str = Sentiment.NEUTRAL.value
    patterns: List[str] = field(default_factory=list)
    intensity: int = 3
    suggestions: List[str] = field(default_factory=list)
    id: Optional[int] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    def __post_init__(self):
        self.sentiment = validate_enum_value(self.sentiment, Sentiment, "sentiment")
        self.intensity = validate_int_range(self.intensity, 1, 10, "intensity")
        self.patterns = list(self.patterns or [])
        self.suggestions = list(self.suggestions or [])

@dataclass
class DayEntry:
    """Собранная картина дня: настроение, активности, сон, ясность"""
    mood: Mood
    date: str
    activities: List[Activity] = field(default_factory=list)
    note: Optional[str] = None
    sleep_quality: Optional[int] = None
    mental_clarity: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mood': self.mood.to_dict(),
            'date': self.date,
            'activities': [a.to_dict() for a in self.activities],
            'note': self.note,
            'sleepQuality': self.sleep_quality,
            'mentalClarity': self.mental_clarity,
        }

# ===== HABITS & GOALS =====

def streak_ending(days: set, today: date) -> int:
    """Серия подряд идущих дней до сегодня (или до вчера, если сегодня пропущено)"""
    current = today if today in days else today - timedelta(days=1)
    streak = 0
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak

def longest_run_of(days: set) -> int:
    ordered = sorted(days)
    if not ordered:
        return 0
    max_streak = current_streak = 1
    for i in range(1, len(ordered)):
        if ordered[i] == ordered[i - 1] + timedelta(days=1):
            current_streak += 1
            max_streak = max(max_streak, current_streak)
        else:
            current_streak = 1
    return max_streak

@dataclass
class UserHabit:
    """Привычка пользователя с историей выполнений"""
    id: str
    title: str
    description: str = ""
    category: str = "mood"
    frequency: str = "daily"
    difficulty: str = "easy"
    evidence_based: bool = False
    source_id: Optional[str] = None
    completed_dates: List[str] = field(default_factory=list)
    last_feedback: Optional[str] = None
    last_feedback_at: Optional[str] = None
    notes: Optional[str] = None
    notifications_enabled: bool = True
    reminder_time: Optional[str] = None
    is_paused: bool = False
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def __post_init__(self):
        self.title = validate_text(self.title, min_length=3, max_length=200, field_name="title")
        self.description = validate_text(self.description or "", min_length=0, max_length=500,
                                         field_name="description")
        if self.last_feedback is not None:
            self.last_feedback = validate_enum_value(self.last_feedback, HabitFeedback, "feedback")
        self.reminder_time = validate_clock(self.reminder_time, "reminder_time")
        self.completed_dates = sorted({validate_date(d) for d in self.completed_dates})

    @property
    def _days(self) -> set:
        return {date.fromisoformat(d) for d in self.completed_dates}

    @property
    def last_completed(self) -> Optional[str]:
        return self.completed_dates[-1] if self.completed_dates else None

    @property
    def total_completed(self) -> int:
        return len(self.completed_dates)

    @property
    def longest_streak(self) -> int:
        return longest_run_of(self._days)

    def is_completed_on(self, day: date) -> bool:
        return day.isoformat() in self.completed_dates

    def current_streak(self, today: date) -> int:
        return streak_ending(self._days, today)

    def complete(self, today: date, feedback: Optional[str] = None) -> bool:
        """Отметить выполнение; повторная отметка за день не меняет серию"""
        newly_completed = not self.is_completed_on(today)
        if newly_completed:
            self.completed_dates = sorted(self.completed_dates + [today.isoformat()])
        if feedback is not None:
            self.last_feedback = validate_enum_value(feedback, HabitFeedback, "feedback")
            self.last_feedback_at = datetime.now().isoformat()
        return newly_completed

    def undo(self, today: date) -> bool:
        """Снять сегодняшнюю отметку"""
        if not self.is_completed_on(today):
            return False
        self.completed_dates = [d for d in self.completed_dates if d != today.isoformat()]
        return True

    def to_record(self) -> Dict[str, Any]:
        """Запись для JSON хранилища"""
        return asdict(self)

    def to_dict(self) -> Dict[str, Any]:
        return {to_camel(k): v for k, v in asdict(self).items()}

    def to_view(self, today: date) -> Dict[str, Any]:
        """Представление для API с вычисляемыми полями"""
        view = self.to_dict()
        view.update({
            'streak': self.current_streak(today),
            'longestStreak': self.longest_streak,
            'isCompletedToday': self.is_completed_on(today),
            'lastCompleted': self.last_completed,
            'totalCompleted': self.total_completed,
        })
        return view

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserHabit":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

@dataclass
class Goal:
    """Цель с отмеченными днями"""
    id: str
    title: str
    description: str = ""
    type: str = "custom"
    category: str = "custom"
    target_days: Optional[int] = None
    is_active: bool = True
    completed_dates: List[str] = field(default_factory=list)
    completed_at: Optional[str] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def __post_init__(self):
        self.title = validate_text(self.title, min_length=3, max_length=200, field_name="title")
        if self.type not in ("preset", "custom"):
            raise ValidationError("type должен быть preset или custom")
        if self.target_days is not None:
            self.target_days = validate_int_range(self.target_days, 1, 365, "target_days")
        self.completed_dates = sorted({validate_date(d) for d in self.completed_dates})

    @property
    def is_completed(self) -> bool:
        return self.target_days is not None and len(self.completed_dates) >= self.target_days

    @property
    def progress_percent(self) -> float:
        if not self.target_days:
            return 0.0
        return round(min(len(self.completed_dates) / self.target_days, 1.0) * 100, 1)

    def current_streak(self, today: date) -> int:
        return streak_ending({date.fromisoformat(d) for d in self.completed_dates}, today)

    def complete_day(self, day: date) -> bool:
        """Отметить день; повтор в тот же день ничего не меняет"""
        key = day.isoformat()
        if key in self.completed_dates:
            return False
        self.completed_dates = sorted(self.completed_dates + [key])
        if self.is_completed and self.completed_at is None:
            self.completed_at = datetime.now().isoformat()
        return True

    def to_record(self) -> Dict[str, Any]:
        """Запись для JSON хранилища"""
        return asdict(self)

    def to_dict(self) -> Dict[str, Any]:
        return {to_camel(k): v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Goal":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
