"""
Append-only log of sign-up, sign-in and sign-out events.

Document ids are human readable:
    sign-up-<username>              one per username, overwritten on repeat
    sign-in-<username>-<n>          n = 1, 2, 3, ... per username
    sign-out-<username>-<n>

The next n is max(existing n) + 1 for the same type and username. The write
is an insert that fails if the id is already taken, in which case the number
is recomputed and the insert retried, so two concurrent sign-ins never
overwrite each other's record.
"""

import logging
from datetime import datetime
from typing import Callable

from app.models.activity import ActivityRecord, ActivityType
from app.repositories.activity import ActivityRepository, DuplicateActivityError
from app.utils import username_from_email, utcnow

logger = logging.getLogger(__name__)

MAX_INSERT_ATTEMPTS = 3


def activity_document_id(activity_type: ActivityType, username: str, sequence_number: int | None = None) -> str:
    if sequence_number is None:
        return f"{activity_type.value}-{username}"
    return f"{activity_type.value}-{username}-{sequence_number}"


class ActivityLogger:
    def __init__(
        self,
        repository: ActivityRepository,
        clock: Callable[[], datetime] = utcnow,
        max_attempts: int = MAX_INSERT_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._repository = repository
        self._clock = clock
        self._max_attempts = max_attempts

    async def record(self, user_id: str, email: str, activity_type: ActivityType) -> ActivityRecord:
        username = username_from_email(email)

        if not activity_type.is_sequenced:
            record = ActivityRecord(
                document_id=activity_document_id(activity_type, username),
                type=activity_type,
                user_id=user_id,
                email=email,
                username=username,
                timestamp=self._clock(),
            )
            await self._repository.upsert(record)
            logger.info("Logged %s activity %s for user %s", activity_type.value, record.document_id, user_id)
            return record

        last_error: DuplicateActivityError | None = None
        for attempt in range(1, self._max_attempts + 1):
            sequence_number = await self.next_sequence_number(activity_type, username)
            record = ActivityRecord(
                document_id=activity_document_id(activity_type, username, sequence_number),
                type=activity_type,
                user_id=user_id,
                email=email,
                username=username,
                timestamp=self._clock(),
                sequence_number=sequence_number,
            )
            try:
                await self._repository.insert(record)
            except DuplicateActivityError as e:
                logger.info("Activity id %s taken (attempt %d); recomputing", e.document_id, attempt)
                last_error = e
                continue
            logger.info("Logged %s activity %s for user %s", activity_type.value, record.document_id, user_id)
            return record

        if last_error is not None:
            raise last_error
        raise RuntimeError(f"Could not log {activity_type.value} activity for {username}")

    async def next_sequence_number(self, activity_type: ActivityType, username: str) -> int:
        try:
            existing = await self._repository.sequence_numbers(activity_type, username)
        except Exception as e:
            # Best-effort uniqueness only; the id will not be dense
            fallback = int(self._clock().timestamp() * 1000)
            logger.error("Failed to scan %s records for %s, using %d: %s", activity_type.value, username, fallback, e)
            return fallback
        return max((n or 0 for n in existing), default=0) + 1
