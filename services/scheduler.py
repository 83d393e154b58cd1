# services/scheduler.py

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from core.database import LocalBackend, StorageBackend

logger = logging.getLogger(__name__)

BACKUP_JOB_ID = "local_backup"

async def run_backup(backend: LocalBackend) -> None:
    path = await backend.create_backup()
    if path:
        logger.info(f"💾 Scheduled backup created: {path}")
    else:
        logger.warning("Scheduled backup was not created")

def create_scheduler(backend: StorageBackend, interval_hours: int,
                     auto_backup: bool = True) -> Optional[AsyncIOScheduler]:
    """Планировщик резервных копий; None если бэкапы не нужны"""
    if not auto_backup or not isinstance(backend, LocalBackend):
        logger.info("Automatic backups disabled")
        return None

    scheduler = AsyncIOScheduler()
    scheduler.add_job(run_backup, 'interval', hours=interval_hours, args=[backend],
                      id=BACKUP_JOB_ID, replace_existing=True)
    return scheduler

def start_scheduler(scheduler: Optional[AsyncIOScheduler]) -> None:
    if scheduler is not None and not scheduler.running:
        scheduler.start()
        logger.info("⏰ Backup scheduler started")

def stop_scheduler(scheduler: Optional[AsyncIOScheduler]) -> None:
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("⏰ Backup scheduler stopped")
