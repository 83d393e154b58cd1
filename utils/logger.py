import logging
import logging.config
from logging.handlers import RotatingFileHandler
from pathlib import Path

def setup_logging(app_config=None):
    """Применить dictConfig из конфигурации приложения"""
    if app_config is None:
        from config import config as app_config
    if app_config.log_to_file:
        app_config.log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(app_config.get_logging_config())
    return logging.getLogger()

def setup_logger(log_file: str = "moodpulse.log", max_bytes: int = 10_000_000, backup_count: int = 5):
    Path(log_file).parent.mkdir(exist_ok=True, parents=True)
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)
    handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger
