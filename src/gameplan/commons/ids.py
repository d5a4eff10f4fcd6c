from __future__ import annotations

from uuid import UUID, uuid4

from uuid6 import uuid7  # type: ignore[import-not-found]


def uuid7_uuid() -> UUID:
    """Generate a UUIDv7 (project-wide standard for row ids)."""
    return uuid7()


def random_uuid() -> UUID:
    """Fully random UUIDv4, for ids that must not be guessable (session ids)."""
    return uuid4()


def parse_uuid(value: str | None) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(str(value).strip())
    except ValueError:
        return None
