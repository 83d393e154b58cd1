from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Dict, Any

from core.models import MoodEntry, ValidationError
from services.mood_service import MoodService
from shared.models import MoodEntryCreate
from utils.validators import is_valid_date

from ..dependencies import get_mood_service

router = APIRouter(prefix="/api/entries", tags=["entries"])

def _check_date(date: str) -> str:
    if not is_valid_date(date):
        raise ValidationError(f"Дата должна быть в формате YYYY-MM-DD: {date}")
    return date

@router.get("", response_model=List[Dict[str, Any]])
async def list_entries(service: MoodService = Depends(get_mood_service)):
    """История записей настроения, новые первыми"""
    data = await service.load_data()
    return [e.to_dict() for e in data['entries']]

@router.post("", status_code=status.HTTP_201_CREATED, response_model=Dict[str, Any])
async def create_entry(payload: MoodEntryCreate, service: MoodService = Depends(get_mood_service)):
    """Записать день; запись за ту же дату заменяется"""
    entry: MoodEntry = await service.add_mood_entry(
        mood_id=payload.mood_id,
        activity_ids=payload.activity_ids,
        note=payload.note,
        date=payload.date,
        sleep_quality=payload.sleep_quality,
        sleep_duration=payload.sleep_duration,
        bedtime=payload.bedtime,
        wake_time=payload.wake_time,
    )
    return entry.to_dict()

@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(entry_id: int, service: MoodService = Depends(get_mood_service)):
    await service.delete_mood_entry(entry_id)

@router.get("/activities", response_model=List[Dict[str, Any]])
async def list_activities(service: MoodService = Depends(get_mood_service)):
    return [a.to_dict() for a in await service.get_activities()]

@router.get("/stats", response_model=Dict[str, Any])
async def entry_stats(service: MoodService = Depends(get_mood_service)):
    return await service.get_mood_stats()

@router.get("/day/{date}", response_model=Dict[str, Any])
async def day_entry(date: str, service: MoodService = Depends(get_mood_service)):
    _check_date(date)
    day = await service.get_entry_for_date(date)
    if day is None:
        raise HTTPException(status_code=404, detail=f"Нет записи за {date}")
    return day.to_dict()

@router.get("/calendar/{date}", response_model=Dict[str, Any])
async def calendar_day(date: str, service: MoodService = Depends(get_mood_service)):
    """Все данные дня для календаря"""
    _check_date(date)
    return await service.get_calendar_day(date)
