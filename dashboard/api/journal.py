from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Dict, Any

from core.constants import JOURNAL_TEMPLATES
from services.journal_service import JournalService
from shared.models import JournalEntryCreate

from ..dependencies import get_journal_service

router = APIRouter(prefix="/api/journal", tags=["journal"])

@router.get("/templates", response_model=List[Dict[str, Any]])
async def list_templates():
    return JOURNAL_TEMPLATES

@router.get("/entries", response_model=List[Dict[str, Any]])
async def list_entries(service: JournalService = Depends(get_journal_service)):
    return [e.to_dict() for e in await service.get_entries()]

@router.post("/entries", status_code=status.HTTP_201_CREATED, response_model=Dict[str, Any])
async def create_entry(payload: JournalEntryCreate, service: JournalService = Depends(get_journal_service)):
    """Сохранить ответы на шаблон; триггеры определяются автоматически"""
    entry = await service.save_entry(payload.template_id, payload.responses)
    return entry.to_dict()

@router.get("/entries/{entry_id}", response_model=Dict[str, Any])
async def get_entry(entry_id: int, service: JournalService = Depends(get_journal_service)):
    entry = await service.get_entry(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Запись дневника {entry_id} не найдена")
    return entry.to_dict()

@router.post("/entries/{entry_id}/analysis", status_code=status.HTTP_201_CREATED, response_model=Dict[str, Any])
async def analyze_entry(entry_id: int, service: JournalService = Depends(get_journal_service)):
    analysis = await service.analyze_entry(entry_id)
    if analysis is None:
        raise HTTPException(status_code=404, detail=f"Запись дневника {entry_id} не найдена")
    return analysis.to_dict()

@router.get("/entries/{entry_id}/analysis", response_model=Dict[str, Any])
async def get_analysis(entry_id: int, service: JournalService = Depends(get_journal_service)):
    analysis = await service.get_analysis(entry_id)
    if analysis is None:
        raise HTTPException(status_code=404, detail=f"Анализ записи {entry_id} не найден")
    return analysis.to_dict()

@router.get("/analysis", response_model=List[Dict[str, Any]])
async def list_analysis(service: JournalService = Depends(get_journal_service)):
    return [a.to_dict() for a in await service.get_all_analysis()]

@router.get("/triggers", response_model=Dict[str, int])
async def trigger_summary(service: JournalService = Depends(get_journal_service)):
    return await service.trigger_summary()
