"""Misc cross-cutting helpers."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4


def generate_uuid() -> str:
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: datetime | str | None) -> datetime | None:
    """Return *value* as an aware UTC datetime.

    PostgREST hands timestamps back as ISO-8601 strings; naive values are
    taken to be UTC.

    Raises:
        ValueError: if *value* is a string that is not ISO-8601.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip())
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
