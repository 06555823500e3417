"""
Activity log records for sign-up, sign-in and sign-out.

Records live in the users collection next to user documents, under
human-readable ids such as "sign-in-alice-3". Only sign-in and sign-out
records carry a sequence number.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field
from pymongo import ASCENDING, IndexModel

from app.models.user import USERS_COLLECTION
from app.utils import utcnow


class ActivityType(str, Enum):
    SIGN_UP = "sign-up"
    SIGN_IN = "sign-in"
    SIGN_OUT = "sign-out"

    @property
    def is_sequenced(self) -> bool:
        return self is not ActivityType.SIGN_UP


class ActivityRecord(BaseModel):
    """Immutable once written."""

    document_id: str
    type: ActivityType
    user_id: str
    email: str
    username: str
    timestamp: datetime = Field(default_factory=utcnow)
    sequence_number: Optional[int] = None


class ActivityDocument(Document):
    id: str  # same value as document_id
    type: ActivityType
    user_id: str
    email: str
    username: str
    timestamp: datetime
    document_id: str
    sequence_number: Optional[int] = None

    class Settings:
        name = USERS_COLLECTION
        keep_nulls = False
        indexes = [
            IndexModel([("type", ASCENDING), ("username", ASCENDING)], name="activity_type_username"),
        ]

    @classmethod
    def from_record(cls, record: ActivityRecord) -> "ActivityDocument":
        return cls(id=record.document_id, **record.model_dump())

    def to_record(self) -> ActivityRecord:
        return ActivityRecord(**self.model_dump(exclude={"id", "revision_id"}))
