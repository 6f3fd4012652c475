from datetime import datetime
from typing import Iterable


def timestamp_id(now: datetime, taken: Iterable[str]) -> str:
    """Millisecond timestamp id, bumped until it is not already taken"""
    existing = set(taken)
    candidate = int(now.timestamp() * 1000)
    while str(candidate) in existing:
        candidate += 1
    return str(candidate)
