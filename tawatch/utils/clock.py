"""시간 유틸리티 — UTC 기준 현재 시각 및 타임존 보정.

Time helpers. Some drivers hand back naive datetimes for timezone-aware
columns; comparisons always go through as_utc().
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """현재 UTC 시각 (timezone-aware)."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """naive datetime은 UTC로 간주 — Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
