"""
Identity repository: CRUD over user documents.

Email uniqueness is enforced by the partial unique index on UserDocument, so
two concurrent creates for one email cannot both succeed; the loser gets a
ConflictError.
"""

import logging
from typing import Any, Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from app.errors import ConflictError
from app.models.roles import Role
from app.models.user import USER_SHAPE, User, UserDocument

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"


def _object_id(user_id: str) -> Optional[PydanticObjectId]:
    try:
        return PydanticObjectId(user_id)
    except (InvalidId, TypeError, ValueError):
        return None


class UserRepository:
    async def _get_document(self, user_id: str) -> Optional[UserDocument]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        return await UserDocument.find_one({"_id": oid, **USER_SHAPE})

    async def get_by_id(self, user_id: str) -> Optional[User]:
        doc = await self._get_document(user_id)
        return doc.to_user() if doc else None

    async def get_by_email(self, email: str) -> Optional[User]:
        doc = await UserDocument.find_one({"email": email, **USER_SHAPE})
        return doc.to_user() if doc else None

    async def list_by_role(self, role: Role) -> list[User]:
        docs = await UserDocument.find({"role": role.value, **USER_SHAPE}).to_list()
        return [d.to_user() for d in docs]

    async def create(self, user: User) -> User:
        doc = UserDocument.from_user(user)
        try:
            await doc.insert()
        except DuplicateKeyError as e:
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from e
        logger.info("Created user %s (%s)", doc.id, doc.email)
        return doc.to_user()

    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[User]:
        """Apply a partial update; returns the updated user or None if absent."""
        doc = await self._get_document(user_id)
        if doc is None:
            return None
        try:
            await doc.set(fields)
        except DuplicateKeyError as e:
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from e
        logger.info("Updated user %s: %s", user_id, sorted(fields))
        return doc.to_user()

    async def delete(self, user_id: str) -> bool:
        doc = await self._get_document(user_id)
        if doc is None:
            return False
        await doc.delete()
        logger.info("Deleted user %s (%s)", user_id, doc.email)
        return True
