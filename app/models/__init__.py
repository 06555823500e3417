"""Beanie document models and Pydantic schemas."""

from app.models.activity import ActivityDocument, ActivityRecord, ActivityType
from app.models.roles import Role, is_allowed
from app.models.user import User, UserDocument

__all__ = [
    "User",
    "UserDocument",
    "ActivityRecord",
    "ActivityDocument",
    "ActivityType",
    "Role",
    "is_allowed",
]
