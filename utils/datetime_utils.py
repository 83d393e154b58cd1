from datetime import datetime, date
from typing import Optional

import pytz

from config import config

def get_timezone():
    return pytz.timezone(config.timezone)

def now_local() -> datetime:
    return datetime.now(get_timezone())

def today() -> date:
    return now_local().date()

def today_str() -> str:
    return today().isoformat()

def utc_now_iso() -> str:
    """Метка времени created_at в формате ISO (UTC)"""
    return datetime.now(pytz.utc).isoformat()

def parse_date(date_str: str, fmt: str = "%Y-%m-%d") -> date:
    return datetime.strptime(date_str, fmt).date()

def ensure_date(value: Optional[object]) -> date:
    """Привести строку/дату к date; None означает сегодня"""
    if value is None:
        return today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    if len(text) == 10:
        return parse_date(text)
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
