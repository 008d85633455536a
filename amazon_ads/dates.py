"""Date helpers. The Amazon Ads API uses compact YYYYMMDD dates with no timezone."""
import re
from datetime import date, datetime, timedelta
from typing import Dict, Union

COMPACT_FORMAT = "%Y%m%d"
_COMPACT_RE = re.compile(r"^\d{8}$")


def to_compact_date(value: Union[date, datetime, str]) -> str:
    """Format a date, datetime or ISO-8601 string as YYYYMMDD."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.strftime(COMPACT_FORMAT)


def from_compact_date(value: str) -> date:
    """Parse YYYYMMDD into a date. Raises ValueError for anything else."""
    if not isinstance(value, str) or not _COMPACT_RE.match(value):
        raise ValueError(f"Invalid Amazon date format: {value!r}. Expected YYYYMMDD")
    return datetime.strptime(value, COMPACT_FORMAT).date()


def is_valid_compact_date(value: str) -> bool:
    try:
        from_compact_date(value)
    except ValueError:
        return False
    return True


def today() -> str:
    return to_compact_date(date.today())


def yesterday() -> str:
    return to_compact_date(date.today() - timedelta(days=1))


def date_range(days: int) -> Dict[str, str]:
    """Range covering the last ``days`` days up to and including today."""
    end = date.today()
    start = end - timedelta(days=days)
    return {"start_date": to_compact_date(start), "end_date": to_compact_date(end)}
