from fastapi import APIRouter, Depends, Query
from typing import List, Dict, Any

from core.constants import SLEEP_TUTORIALS, MOODS
from core.repository import WellnessRepository
from services.achievements import AchievementService
from services.analytics import (
    activity_correlations, weekday_peaks, mood_distribution, sleep_quality_distribution,
    mood_trend, consecutive_days, longest_run, happy_streak, good_sleep_days
)

from ..dependencies import get_repository, get_achievement_service

router = APIRouter(prefix="/api/insights", tags=["insights"])

@router.get("/correlations/activities", response_model=List[Dict[str, Any]])
async def activity_impact(repository: WellnessRepository = Depends(get_repository)):
    """Влияние активностей на настроение"""
    entries = await repository.get_mood_entries()
    links = await repository.get_all_entry_activities()
    activities = await repository.get_activities()
    return activity_correlations(entries, links, activities)

@router.get("/weekday-peaks", response_model=Dict[str, Any])
async def weekday_patterns(repository: WellnessRepository = Depends(get_repository)):
    moods = await repository.get_mood_entries()
    sleep = await repository.get_sleep_entries()
    clarity = await repository.get_mental_clarity_tests()
    return weekday_peaks({
        'mood': [(e.date, e.mood_id) for e in moods],
        'sleep': [(s.date, s.quality) for s in sleep],
        'mentalClarity': [(t.date, t.score) for t in clarity],
    })

@router.get("/distributions", response_model=Dict[str, Dict[int, int]])
async def distributions(repository: WellnessRepository = Depends(get_repository)):
    return {
        'mood': mood_distribution(await repository.get_mood_entries()),
        'sleepQuality': sleep_quality_distribution(await repository.get_sleep_entries()),
    }

@router.get("/trend", response_model=Dict[str, Any])
async def trend(days: int = Query(30, ge=2, le=365), repository: WellnessRepository = Depends(get_repository)):
    return mood_trend(await repository.get_mood_entries(), days)

@router.get("/streaks", response_model=Dict[str, int])
async def streaks(repository: WellnessRepository = Depends(get_repository)):
    moods = await repository.get_mood_entries()
    dates = [e.date for e in moods]
    return {
        'currentStreak': consecutive_days(dates),
        'longestStreak': longest_run(dates),
        'happyStreak': happy_streak(moods),
        'goodSleepDays': good_sleep_days(await repository.get_sleep_entries()),
    }

@router.get("/achievements", response_model=List[Dict[str, Any]])
async def achievements(service: AchievementService = Depends(get_achievement_service)):
    """Все достижения с прогрессом; новые сохраняются при просмотре"""
    return await service.overview()

@router.post("/achievements/refresh", response_model=List[Dict[str, Any]])
async def refresh_achievements(service: AchievementService = Depends(get_achievement_service)):
    return await service.refresh()

@router.get("/tutorials", response_model=List[Dict[str, Any]])
async def sleep_tutorials():
    return SLEEP_TUTORIALS

@router.get("/moods", response_model=List[Dict[str, Any]])
async def moods():
    return [m.to_dict() for m in MOODS]
