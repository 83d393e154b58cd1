import pytest

from config import AppConfig, Environment, StorageBackendType, config
from core.database import LocalBackend, RestBackend, create_backend

def test_test_environment():
    assert config.environment == Environment.TESTING
    assert config.storage.backend == StorageBackendType.LOCAL
    assert not config.use_remote_storage
    assert config.storage.habits_dir == config.data_dir / "habits"

def test_logging_config_without_file():
    logging_config = config.get_logging_config()
    assert logging_config['loggers']['']['handlers'] == ['console']
    assert logging_config['loggers']['apscheduler']['level'] == 'WARNING'

def test_remote_storage_when_configured(monkeypatch):
    monkeypatch.setenv('STORAGE_BACKEND', 'auto')
    monkeypatch.setenv('SUPABASE_URL', 'https://example.supabase.co/')
    monkeypatch.setenv('SUPABASE_ANON_KEY', 'anon')

    app_config = AppConfig()
    assert app_config.use_remote_storage
    assert app_config.supabase.url == 'https://example.supabase.co'

    backend = create_backend(app_config)
    assert isinstance(backend, RestBackend)
    assert backend.base_url == 'https://example.supabase.co/rest/v1'

def test_local_backend_forced(monkeypatch):
    monkeypatch.setenv('STORAGE_BACKEND', 'local')
    monkeypatch.setenv('SUPABASE_URL', 'https://example.supabase.co')
    monkeypatch.setenv('SUPABASE_ANON_KEY', 'anon')

    app_config = AppConfig()
    assert not app_config.use_remote_storage
    backend = create_backend(app_config)
    assert isinstance(backend, LocalBackend)
    backend.executor.shutdown()

def test_rest_requires_credentials(monkeypatch):
    monkeypatch.setenv('STORAGE_BACKEND', 'rest')
    with pytest.raises(ValueError):
        AppConfig()

def test_invalid_url(monkeypatch):
    monkeypatch.setenv('SUPABASE_URL', 'example.supabase.co')
    monkeypatch.setenv('SUPABASE_ANON_KEY', 'anon')
    with pytest.raises(ValueError):
        AppConfig()

def test_invalid_port(monkeypatch):
    monkeypatch.setenv('PORT', '70000')
    with pytest.raises(ValueError):
        AppConfig()

def test_to_dict_has_no_secrets(monkeypatch):
    monkeypatch.setenv('OPENAI_API_KEY', 'sk-secret')
    data = AppConfig().to_dict()
    assert data['ai_enabled'] is True
    assert 'sk-secret' not in str(data)
