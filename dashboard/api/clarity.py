from fastapi import APIRouter, Depends, status
from typing import List, Dict, Any

from core.repository import WellnessRepository
from services.analytics import normalize_clarity_score, clarity_performance_level
from shared.models import ClarityTestCreate

from ..dependencies import get_repository

router = APIRouter(prefix="/api/clarity", tags=["clarity"])

@router.get("", response_model=List[Dict[str, Any]])
async def list_tests(repository: WellnessRepository = Depends(get_repository)):
    tests = await repository.get_mental_clarity_tests()
    return [t.to_dict() | {'level': clarity_performance_level(t.score)} for t in tests]

@router.post("", status_code=status.HTTP_201_CREATED, response_model=Dict[str, Any])
async def record_test(payload: ClarityTestCreate, repository: WellnessRepository = Depends(get_repository)):
    """Сохранить тест; без явного score он вычисляется из сырых результатов"""
    score = payload.score
    if score is None:
        score = normalize_clarity_score(payload.test_type, payload.results)

    test_id = await repository.insert_mental_clarity_test(
        score=score,
        reaction_times=payload.reaction_times,
        accuracy=payload.accuracy,
        duration=payload.duration,
        test_type=payload.test_type,
    )
    return {'id': test_id, 'score': score, 'level': clarity_performance_level(score)}
