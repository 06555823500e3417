"""
Activity record persistence.

insert() is a create-if-absent on the document id; upsert() overwrites.
"""

from typing import Optional

from pymongo.errors import DuplicateKeyError

from app.models.activity import ActivityDocument, ActivityRecord, ActivityType


class DuplicateActivityError(Exception):
    """Another record already holds this document id."""

    def __init__(self, document_id: str) -> None:
        self.document_id = document_id
        super().__init__(f"Activity record already exists: {document_id}")


class ActivityRepository:
    async def sequence_numbers(self, activity_type: ActivityType, username: str) -> list[Optional[int]]:
        docs = await ActivityDocument.find(
            {"type": activity_type.value, "username": username}
        ).to_list()
        return [d.sequence_number for d in docs]

    async def insert(self, record: ActivityRecord) -> None:
        try:
            await ActivityDocument.from_record(record).insert()
        except DuplicateKeyError as e:
            raise DuplicateActivityError(record.document_id) from e

    async def upsert(self, record: ActivityRecord) -> None:
        await ActivityDocument.from_record(record).save()

