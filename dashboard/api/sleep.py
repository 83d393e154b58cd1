from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Dict, Any

from core.models import SleepEntry, ValidationError
from core.repository import WellnessRepository
from services.analytics import (
    sleep_logs_from_entries, average_sleep_last_n_days, format_hours, sleep_quality_distribution
)
from shared.models import SleepEntryCreate
from utils.datetime_utils import today_str
from utils.validators import is_valid_date

from ..dependencies import get_repository

router = APIRouter(prefix="/api/sleep", tags=["sleep"])

@router.get("", response_model=List[Dict[str, Any]])
async def list_sleep(repository: WellnessRepository = Depends(get_repository)):
    return [s.to_dict() for s in await repository.get_sleep_entries()]

@router.post("", response_model=Dict[str, Any])
async def save_sleep(payload: SleepEntryCreate, repository: WellnessRepository = Depends(get_repository)):
    """Сохранить сон за дату; существующая запись обновляется"""
    entry = SleepEntry(
        date=payload.date or today_str(),
        quality=payload.quality,
        duration=payload.duration,
        bedtime=payload.bedtime,
        wake_time=payload.wake_time,
    )
    saved = await repository.save_sleep_entry(entry)
    return saved.to_dict()

@router.get("/average", response_model=Dict[str, Any])
async def average_sleep(days: int = Query(7, ge=1, le=365),
                        repository: WellnessRepository = Depends(get_repository)):
    logs = sleep_logs_from_entries(await repository.get_sleep_entries())
    hours = average_sleep_last_n_days(logs, days)
    return {
        'days': days,
        'averageHours': round(hours, 2) if hours is not None else None,
        'formatted': format_hours(hours) if hours is not None else None,
    }

@router.get("/distribution", response_model=Dict[int, int])
async def quality_distribution(repository: WellnessRepository = Depends(get_repository)):
    return sleep_quality_distribution(await repository.get_sleep_entries())

@router.get("/{date}", response_model=Dict[str, Any])
async def sleep_for_date(date: str, repository: WellnessRepository = Depends(get_repository)):
    if not is_valid_date(date):
        raise ValidationError(f"Дата должна быть в формате YYYY-MM-DD: {date}")
    entry = await repository.get_sleep_entry_for_date(date)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Нет записи сна за {date}")
    return entry.to_dict()
