import os
import tempfile

# Конфигурация читается при импорте: окружение задаётся до импорта config
_BASE_DIR = tempfile.mkdtemp(prefix="moodpulse-tests-")
os.environ.update({
    'ENVIRONMENT': 'testing',
    'DATA_DIR': os.path.join(_BASE_DIR, 'data'),
    'EXPORT_DIR': os.path.join(_BASE_DIR, 'exports'),
    'BACKUP_DIR': os.path.join(_BASE_DIR, 'backups'),
    'LOG_DIR': os.path.join(_BASE_DIR, 'logs'),
    'LOG_TO_FILE': 'false',
    'AUTO_BACKUP': 'false',
    'STORAGE_BACKEND': 'local',
    'TIMEZONE': 'UTC',
})
for _name in ('SUPABASE_URL', 'SUPABASE_ANON_KEY', 'OPENAI_API_KEY'):
    os.environ.pop(_name, None)

import pytest
from fastapi.testclient import TestClient

from config import config
from core.database import LocalBackend
from core.repository import WellnessRepository
from database.history import FeedbackHistory
from database.manager import UserStore
from dashboard.app import create_app
from services import ServiceManager
from services.ai_service import JournalAnalyzer

USER_ID = "user-1"

@pytest.fixture
async def backend(tmp_path):
    backend = LocalBackend(tmp_path / "wellness.json", backup_dir=tmp_path / "backups", max_backups=3)
    yield backend
    await backend.close()

@pytest.fixture
async def repository(backend):
    repository = WellnessRepository(backend, USER_ID)
    await repository.init_database()
    return repository

@pytest.fixture
def store(tmp_path):
    return UserStore(tmp_path / "habits")

@pytest.fixture
def history(tmp_path):
    return FeedbackHistory(tmp_path / "habits" / "history")

@pytest.fixture
def manager(tmp_path):
    return ServiceManager(
        config,
        backend=LocalBackend(tmp_path / "api.json", backup_dir=tmp_path / "api-backups"),
        store=UserStore(tmp_path / "api-habits"),
        history=FeedbackHistory(tmp_path / "api-habits" / "history"),
        analyzer=JournalAnalyzer(),
    )

@pytest.fixture
def client(manager):
    with TestClient(create_app(manager=manager, with_scheduler=False)) as test_client:
        yield test_client

@pytest.fixture
def headers():
    return {"X-User-Id": USER_ID}
