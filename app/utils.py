"""Small helpers shared across services."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current time; the default clock for services."""
    return datetime.now(timezone.utc)


def username_from_email(email: str) -> str:
    """Local part of an address: everything before the first '@'."""
    return email.split("@", 1)[0]
