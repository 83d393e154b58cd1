from fastapi import APIRouter, Depends, Query
from typing import Dict, Any

from core.repository import WellnessRepository
from services import ServiceManager
from services.data_export import export_user_archive
from shared.models import ExportFormat

from ..dependencies import get_repository, get_service_manager, get_user_id

router = APIRouter(prefix="/api/account", tags=["account"])

@router.get("/export", response_model=Dict[str, Any])
async def export_json(repository: WellnessRepository = Depends(get_repository)):
    """Все данные пользователя одним JSON документом"""
    return await repository.export_all_user_data()

@router.post("/export", response_model=Dict[str, Any])
async def export_files(fmt: ExportFormat = Query(ExportFormat.ALL, alias="format"),
                       repository: WellnessRepository = Depends(get_repository),
                       manager: ServiceManager = Depends(get_service_manager)):
    """Записать экспорт в каталог EXPORT_DIR"""
    files = await export_user_archive(repository, manager.config.export_dir, fmt.value)
    return {'files': [str(f) for f in files]}

@router.delete("", response_model=Dict[str, Any])
async def delete_account_data(user_id: str = Depends(get_user_id),
                              manager: ServiceManager = Depends(get_service_manager)):
    """Удалить все записи, привычки, цели и достижения пользователя"""
    deleted = await manager.mood(user_id).delete_all_data()
    manager.habits(user_id).delete_all()
    return {'deleted': deleted}
