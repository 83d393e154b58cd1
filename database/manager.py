# database/manager.py

"""
Хранилище привычек, целей и достижений: один JSON файл на пользователя.
"""

import json
import hashlib
import logging
import threading
from pathlib import Path
from typing import Optional, Dict, Any
from urllib.parse import quote

logger = logging.getLogger(__name__)

SECTIONS = ('habits', 'goals', 'achievements')

# Ограничение длины имени файла в большинстве ФС 255 байт
MAX_KEY_LENGTH = 200

def user_file_key(user_id: str) -> str:
    """Взаимно однозначное имя файла для user_id (процентное кодирование)"""
    if not user_id:
        raise ValueError("user_id не может быть пустым")
    key = quote(str(user_id), safe='')
    if len(key) > MAX_KEY_LENGTH:
        # quote не выдаёт "%" со строчной буквой, пересечений с обычными ключами нет
        key = "%sha256-" + hashlib.sha256(str(user_id).encode("utf-8")).hexdigest()
    return key

class UserStore:
    """Файлы вида user_<id>.json в базовой директории"""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, app_config=None) -> "UserStore":
        if app_config is None:
            from config import config as app_config
        return cls(app_config.storage.habits_dir)

    def _user_file(self, user_id: str) -> Path:
        return self.base_dir / f"user_{user_file_key(user_id)}.json"

    def load_user_data(self, user_id: str) -> Optional[Dict[str, Any]]:
        path = self._user_file(user_id)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def save_user_data(self, user_id: str, data: Dict[str, Any]) -> None:
        path = self._user_file(user_id)
        temp_file = path.with_suffix('.tmp')
        with self._lock:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            temp_file.replace(path)

    def get_section(self, user_id: str, section: str) -> list:
        if section not in SECTIONS:
            raise KeyError(section)
        data = self.load_user_data(user_id) or {}
        return list(data.get(section, []))

    def save_section(self, user_id: str, section: str, items: list) -> None:
        if section not in SECTIONS:
            raise KeyError(section)
        data = self.load_user_data(user_id) or {}
        data[section] = items
        self.save_user_data(user_id, data)

    def delete_user_data(self, user_id: str) -> bool:
        file = self._user_file(user_id)
        if file.exists():
            file.unlink()
            logger.info(f"Habit data removed for user {user_id}")
            return True
        return False
