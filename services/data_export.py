# services/data_export.py

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Any

import pandas as pd

from core.repository import WellnessRepository
from database.manager import user_file_key

logger = logging.getLogger(__name__)

# Разделы экспорта, которые выгружаются в CSV
CSV_SECTIONS = (
    'moodEntries', 'intimacyEntries', 'sleepEntries',
    'mentalClarityTests', 'journalEntries', 'aiAnalysis',
)

def export_to_json(user_id: str, data: dict, export_dir: Path) -> Path:
    export_dir.mkdir(parents=True, exist_ok=True)
    filename = export_dir / f"user_{user_file_key(user_id)}_export.json"
    with open(filename, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    return filename

def export_to_csv(user_id: str, data: List[Dict[str, Any]], export_dir: Path,
                  name: str = "export") -> Optional[Path]:
    if not data:
        return None
    export_dir.mkdir(parents=True, exist_ok=True)
    filename = export_dir / f"user_{user_file_key(user_id)}_{name}.csv"
    df = pd.DataFrame(data)
    # Списки (reactionTimes, responses, ...) сохраняются как JSON строки
    for column in df.columns:
        if df[column].map(lambda v: isinstance(v, (list, dict))).any():
            df[column] = df[column].map(lambda v: json.dumps(v, ensure_ascii=False))
    df.to_csv(filename, index=False)
    return filename

async def export_user_archive(repository: WellnessRepository, export_dir: Path,
                              fmt: str = "all") -> List[Path]:
    """Выгрузить данные пользователя в JSON и/или CSV; возвращает созданные файлы"""
    if fmt not in ("json", "csv", "all"):
        raise ValueError(f"Неизвестный формат экспорта: {fmt}")

    payload = await repository.export_all_user_data()
    user_id = payload['userId']
    files: List[Path] = []

    if fmt in ("json", "all"):
        files.append(export_to_json(user_id, payload, export_dir))

    if fmt in ("csv", "all"):
        for section in CSV_SECTIONS:
            path = export_to_csv(user_id, payload[section], export_dir, name=section)
            if path is not None:
                files.append(path)

    logger.info(f"📦 Exported {len(files)} files for user {user_id} to {export_dir}")
    return files
