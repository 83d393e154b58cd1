import re
from datetime import date

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

def is_valid_date(date_str: str) -> bool:
    if not (isinstance(date_str, str) and _DATE_RE.match(date_str)):
        return False
    try:
        date.fromisoformat(date_str)
    except ValueError:
        return False
    return True

def is_valid_clock(value: str) -> bool:
    return bool(isinstance(value, str) and _CLOCK_RE.match(value))
