"""
Password hashing with bcrypt.

Hashing and checking are CPU-bound (tens of milliseconds at cost 10); async
callers should run them via asyncio.to_thread so the event loop is not blocked.
"""

import bcrypt

DEFAULT_ROUNDS = 10


class PasswordHasher:
    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self._rounds = rounds

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """False for a wrong password and for a malformed hash."""
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, AttributeError):
            return False
