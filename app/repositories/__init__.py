"""MongoDB-backed repositories."""

from app.repositories.activity import ActivityRepository, DuplicateActivityError
from app.repositories.users import UserRepository

__all__ = ["ActivityRepository", "DuplicateActivityError", "UserRepository"]
