from __future__ import annotations

from datetime import datetime
from typing import Optional


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
BACKUP_STAMP_FORMAT = "%Y%m%d_%H%M%S"


def now() -> datetime:
    """Local wall-clock time; sale timestamps are shop-local."""
    return datetime.now()


def now_str(dt: Optional[datetime] = None) -> str:
    return (dt or now()).strftime(TIMESTAMP_FORMAT)


def backup_stamp(dt: Optional[datetime] = None) -> str:
    return (dt or now()).strftime(BACKUP_STAMP_FORMAT)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a stored sale timestamp.

    - None / "" -> None
    - anything not in TIMESTAMP_FORMAT -> None (older files may hold free text)
    """
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), TIMESTAMP_FORMAT)
    except ValueError:
        return None
