from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Dict, Any
from enum import Enum

from utils.validators import is_valid_clock

# Базовые перечисления
class IntimacyKind(str, Enum):
    SOLO = "solo"
    COUPLE = "couple"

class FeedbackKind(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"

class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    ALL = "all"

class ApiModel(BaseModel):
    """JSON в camelCase, в Python - snake_case"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

def _clock(v: Optional[str]) -> Optional[str]:
    if v is not None and not is_valid_clock(v):
        raise ValueError("Время должно быть в формате HH:MM")
    return v

# Записи настроения
class MoodEntryCreate(ApiModel):
    mood_id: int = Field(..., ge=1, le=5)
    activity_ids: List[int] = []
    note: Optional[str] = Field(None, max_length=500)
    date: Optional[str] = None
    sleep_quality: Optional[int] = Field(None, ge=0, le=5)
    sleep_duration: Optional[float] = Field(None, ge=0, le=24)
    bedtime: Optional[str] = None
    wake_time: Optional[str] = None

    @field_validator('activity_ids')
    @classmethod
    def unique_activities(cls, v):
        return list(dict.fromkeys(v))

    _check_clock = field_validator('bedtime', 'wake_time')(_clock)

class SleepEntryCreate(ApiModel):
    date: Optional[str] = None
    quality: int = Field(0, ge=0, le=5)
    duration: Optional[float] = Field(None, ge=0, le=24)
    bedtime: Optional[str] = None
    wake_time: Optional[str] = None

    _check_clock = field_validator('bedtime', 'wake_time')(_clock)

class IntimacyEntryCreate(ApiModel):
    date: Optional[str] = None
    type: IntimacyKind = IntimacyKind.SOLO
    orgasmed: bool = False
    place: str = ""
    toys: bool = False
    time_to_sleep: int = Field(0, ge=0)
    mood_before: int = Field(3, ge=1, le=5)
    mood_after: int = Field(3, ge=1, le=5)

class ClarityTestCreate(ApiModel):
    test_type: str = "focus"
    score: Optional[float] = Field(None, ge=0)
    reaction_times: List[float] = []
    accuracy: float = Field(0, ge=0)
    duration: int = Field(0, ge=0)
    # Сырые результаты для нормализации (max_level, accuracy, score)
    results: Dict[str, Any] = {}

# Дневник
class JournalEntryCreate(ApiModel):
    template_id: str
    responses: List[str]

# Привычки и цели
class HabitCreate(ApiModel):
    library_id: Optional[str] = None
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: str = ""
    category: str = "mood"
    frequency: str = "daily"
    difficulty: str = "easy"
    reminder_time: Optional[str] = None

    _check_clock = field_validator('reminder_time')(_clock)

class HabitComplete(ApiModel):
    feedback: Optional[FeedbackKind] = None

class HabitFeedbackCreate(ApiModel):
    feedback: FeedbackKind
    notes: Optional[str] = Field(None, max_length=500)

class GoalCreate(ApiModel):
    preset_title: Optional[str] = None
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: str = ""
    category: str = "custom"
    target_days: Optional[int] = Field(None, ge=1, le=365)

class GoalDayComplete(ApiModel):
    date: Optional[str] = None

# Ответы
class HealthCheck(ApiModel):
    status: str
    service: str
    version: str
    timestamp: float
    uptime_seconds: int
    storage: Dict[str, Any]
    memory_mb: float
