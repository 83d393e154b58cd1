from fastapi import APIRouter, Depends, Query, status
from typing import List, Dict, Any, Optional

from core.models import IntimacyEntry, TimeRange
from core.repository import WellnessRepository
from services.analytics import intimacy_correlations
from services.mood_service import MoodService
from shared.models import IntimacyEntryCreate
from utils.datetime_utils import today_str

from ..dependencies import get_repository, get_mood_service

router = APIRouter(prefix="/api/intimacy", tags=["intimacy"])

@router.get("", response_model=List[Dict[str, Any]])
async def list_intimacy(service: MoodService = Depends(get_mood_service)):
    return [e.to_dict() for e in await service.get_intimacy_entries()]

@router.post("", response_model=Dict[str, Any])
async def save_intimacy(payload: IntimacyEntryCreate, service: MoodService = Depends(get_mood_service)):
    """Одна запись на дату: повторное сохранение обновляет её"""
    entry = IntimacyEntry(
        date=payload.date or today_str(),
        type=payload.type.value,
        orgasmed=payload.orgasmed,
        place=payload.place,
        toys=payload.toys,
        time_to_sleep=payload.time_to_sleep,
        mood_before=payload.mood_before,
        mood_after=payload.mood_after,
    )
    saved = await service.add_intimacy_entry(entry)
    return saved.to_dict()

@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_intimacy(entry_id: int, repository: WellnessRepository = Depends(get_repository)):
    await repository.delete_intimacy_entry(entry_id)

@router.get("/correlations", response_model=Optional[Dict[str, Any]])
async def correlations(time_range: TimeRange = Query(TimeRange.MONTH, alias="range"),
                       repository: WellnessRepository = Depends(get_repository)):
    """Связь с настроением и сном; null если в периоде нет записей"""
    intimacy = await repository.get_intimacy_entries()
    moods = await repository.get_mood_entries()
    sleep = await repository.get_sleep_entries()
    return intimacy_correlations(intimacy, moods, sleep, time_range.value)
