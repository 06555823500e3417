"""
User management for administrators.

Only accounts with role "user" are visible here; admins and other roles are
reported as not found.
"""

import asyncio
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator, Optional

from app.errors import AppError, ConflictError, InternalError, NotFoundError
from app.models.roles import Role
from app.models.user import User
from app.repositories.users import UserRepository
from app.services.passwords import PasswordHasher
from app.utils import utcnow

logger = logging.getLogger(__name__)


@contextmanager
def _internal_errors(message: str) -> Iterator[None]:
    """Let AppErrors through; turn anything else into InternalError(message)."""
    try:
        yield
    except AppError:
        raise
    except Exception as e:
        logger.exception(message)
        raise InternalError(message) from e


def _not_found(user_id: str) -> NotFoundError:
    return NotFoundError(f"User with ID {user_id} not found")


class UserService:
    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._users = users
        self._hasher = hasher
        self._clock = clock

    async def list_users(self) -> list[User]:
        with _internal_errors("Failed to fetch users"):
            return await self._users.list_by_role(Role.USER)

    async def get_user(self, user_id: str) -> User:
        with _internal_errors("Failed to fetch user"):
            return await self._get_managed(user_id)

    async def create_user(self, email: str, password: str, is_verified: Optional[bool] = None) -> User:
        with _internal_errors("Failed to create user"):
            if await self._users.get_by_email(email):
                raise ConflictError("User with this email already exists")

            password_hash = await asyncio.to_thread(self._hasher.hash_password, password)
            now = self._clock()
            user = await self._users.create(
                User(
                    email=email,
                    password=password_hash,
                    role=Role.USER,
                    is_verified=True if is_verified is None else is_verified,
                    created_at=now,
                    updated_at=now,
                )
            )
            logger.info("Created user %s (%s)", user.id, user.email)
            return user

    async def update_user(
        self,
        user_id: str,
        email: Optional[str] = None,
        password: Optional[str] = None,
        is_verified: Optional[bool] = None,
    ) -> User:
        with _internal_errors("Failed to update user"):
            user = await self._get_managed(user_id)
            fields: dict[str, Any] = {"updated_at": self._clock()}

            if email is not None:
                if email != user.email and await self._users.get_by_email(email):
                    raise ConflictError("User with this email already exists")
                fields["email"] = email

            if password is not None:
                fields["password"] = await asyncio.to_thread(self._hasher.hash_password, password)

            if is_verified is not None:
                fields["is_verified"] = is_verified

            updated = await self._users.update(user_id, fields)
            if updated is None:
                raise _not_found(user_id)
            return updated

    async def delete_user(self, user_id: str) -> dict[str, str]:
        with _internal_errors("Failed to delete user"):
            await self._get_managed(user_id)
            if not await self._users.delete(user_id):
                raise _not_found(user_id)
            return {"message": "User deleted successfully"}

    async def _get_managed(self, user_id: str) -> User:
        user = await self._users.get_by_id(user_id)
        if user is None or user.role != Role.USER:
            raise _not_found(user_id)
        return user


async def create_admin(users: UserRepository, hasher: PasswordHasher, email: str, password: str) -> User:
    """Create an admin account, or promote the existing account with this email."""
    password_hash = await asyncio.to_thread(hasher.hash_password, password)
    now = utcnow()
    existing = await users.get_by_email(email)
    if existing:
        promoted = await users.update(
            existing.id,
            {"role": Role.ADMIN, "password": password_hash, "is_verified": True, "updated_at": now},
        )
        if promoted is None:
            raise InternalError(f"Account {email} disappeared while promoting it to admin")
        return promoted
    return await users.create(
        User(email=email, password=password_hash, role=Role.ADMIN, is_verified=True, created_at=now, updated_at=now)
    )
