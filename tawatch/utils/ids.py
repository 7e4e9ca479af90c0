"""요청 본문 ID 파싱 유틸리티.

Request bodies carry ids as strings; this turns them into UUIDs with a
400 instead of a 500 on malformed input.
"""

from uuid import UUID

from tawatch.utils.exceptions import BadRequestError


def parse_uuid(value: str, field: str = "id") -> UUID:
    """문자열을 UUID로 변환합니다 — Raise 400 for malformed ids."""
    try:
        return UUID(str(value))
    except ValueError:
        raise BadRequestError(f"Invalid {field}")


def parse_optional_uuid(value: str | None, field: str = "id") -> UUID | None:
    return None if value is None else parse_uuid(value, field)
