"""
In-memory, time-bounded key/value store for pending sign-up credentials.

State is process-local: it does not survive a restart and is not shared
between instances. Running more than one instance needs a shared backend
behind the same interface.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterator, List, Optional

from app.utils import utcnow


@dataclass(frozen=True)
class StoredValue:
    value: str
    expires_at: Optional[datetime] = None  # None never expires

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at


class ExpiringStore:
    """
    Dict-backed store whose entries may carry an expiry time.

    Expired entries are not removed on read; get_entry() still returns them
    so callers can react to expiry. purge_expired() removes them in bulk.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._entries: Dict[str, StoredValue] = {}

    def set(self, key: str, value: str, ttl: Optional[timedelta] = None) -> StoredValue:
        expires_at = self._clock() + ttl if ttl is not None else None
        entry = StoredValue(value=value, expires_at=expires_at)
        self._entries[key] = entry
        return entry

    def get_entry(self, key: str) -> Optional[StoredValue]:
        return self._entries.get(key)

    def get(self, key: str) -> Optional[str]:
        """Value for key, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None or entry.is_expired(self._clock()):
            return None
        return entry.value

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def purge_expired(self) -> List[str]:
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return expired

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))
