# database/history.py

"""
История отзывов о привычках: дополняемый журнал на пользователя.
"""

import json
import threading
from pathlib import Path
from typing import List, Dict, Any, Optional

from database.manager import user_file_key

class FeedbackHistory:
    """Файлы вида user_<id>_history.json"""

    def __init__(self, history_dir: Path):
        self.history_dir = Path(history_dir)
        self.history_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, app_config=None) -> "FeedbackHistory":
        if app_config is None:
            from config import config as app_config
        return cls(app_config.storage.habits_dir / "history")

    def _history_file(self, user_id: str) -> Path:
        return self.history_dir / f"user_{user_file_key(user_id)}_history.json"

    def append_history(self, user_id: str, entry: Dict[str, Any]) -> None:
        path = self._history_file(user_id)
        with self._lock:
            history = self.get_history(user_id)
            history.append(entry)
            temp_file = path.with_suffix('.tmp')
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(history, f, ensure_ascii=False, indent=2)
            temp_file.replace(path)

    def get_history(self, user_id: str, habit_id: Optional[str] = None) -> List[Dict[str, Any]]:
        path = self._history_file(user_id)
        if not path.exists():
            return []
        with open(path, "r", encoding="utf-8") as f:
            history = json.load(f)
        if habit_id is not None:
            history = [h for h in history if h.get('habitId') == habit_id]
        return history

    def delete_history(self, user_id: str) -> None:
        path = self._history_file(user_id)
        if path.exists():
            path.unlink()
