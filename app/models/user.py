"""
User model for MongoDB (Beanie ODM).

User is the plain record services work with; UserDocument is how it is
stored. The users collection also holds activity records, so user documents
are recognised by shape: only they carry is_verified.
"""

from datetime import datetime
from typing import Any, Optional

from beanie import Document
from pydantic import BaseModel, Field
from pymongo import ASCENDING, IndexModel

from app.models.roles import Role
from app.utils import utcnow

USERS_COLLECTION = "users"

# Filter that matches user documents only (activity records never have is_verified)
USER_SHAPE: dict[str, Any] = {"is_verified": {"$exists": True}}


class User(BaseModel):
    """An account. password holds the bcrypt hash, never the plain text."""

    id: Optional[str] = None
    email: str
    password: Optional[str] = None
    role: Role = Role.USER
    is_verified: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_login_at: Optional[datetime] = None

    def summary(self) -> dict:
        """Shape returned alongside an access token."""
        return {"id": self.id, "email": self.email}

    def public_dict(self) -> dict:
        """Everything except the password hash, camelCased for the API."""
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role.value,
            "isVerified": self.is_verified,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "lastLoginAt": self.last_login_at.isoformat() if self.last_login_at else None,
        }


class UserDocument(Document):
    """
    User document. id is MongoDB ObjectId; email is unique among user documents.
    """

    email: str
    password: Optional[str] = None
    role: Role = Role.USER
    is_verified: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_login_at: Optional[datetime] = None

    class Settings:
        name = USERS_COLLECTION
        use_state_management = True
        keep_nulls = False
        indexes = [
            # Partial so activity records (which repeat the email) are not constrained
            IndexModel(
                [("email", ASCENDING)],
                name="user_email_unique",
                unique=True,
                partialFilterExpression=USER_SHAPE,
            ),
            IndexModel([("role", ASCENDING)], name="user_role"),
        ]

    class Config:
        json_schema_extra = {
            "example": {
                "email": "user@example.com",
                "role": "user",
                "is_verified": True,
                "created_at": "2025-01-01T00:00:00Z",
            }
        }

    @classmethod
    def from_user(cls, user: User) -> "UserDocument":
        return cls(**user.model_dump(exclude={"id"}))

    def to_user(self) -> User:
        return User(id=str(self.id), **self.model_dump(exclude={"id", "revision_id"}))
