"""
One-time password engine for the two-step sign-up.

Step one stores a code and stages the password hash; step two verifies the
code. Verification consumes the code but leaves the staged hash in place, so
account creation can pick it up without asking for the password again.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from app.services.credential_store import ExpiringStore
from app.utils import utcnow

logger = logging.getLogger(__name__)

OTP_EXPIRY = timedelta(minutes=10)
OTP_LENGTH = 6

_OTP_MIN = 10 ** (OTP_LENGTH - 1)
_OTP_SPAN = 9 * _OTP_MIN  # 100000..999999


class OtpService:
    """Owns the pending OTP and staged password stores; nothing else mutates them."""

    def __init__(
        self,
        clock: Callable[[], datetime] = utcnow,
        otp_store: Optional[ExpiringStore] = None,
        password_store: Optional[ExpiringStore] = None,
    ) -> None:
        self._clock = clock
        self._otps = otp_store if otp_store is not None else ExpiringStore(clock)
        self._passwords = password_store if password_store is not None else ExpiringStore(clock)

    def generate_code(self) -> str:
        return str(_OTP_MIN + secrets.randbelow(_OTP_SPAN))

    def store(self, email: str, code: str) -> datetime:
        """Replace any pending OTP for email; returns its expiry time."""
        entry = self._otps.set(email, code, ttl=OTP_EXPIRY)
        self._purge_expired()
        return entry.expires_at

    def verify(self, email: str, code: str) -> bool:
        entry = self._otps.get_entry(email)
        if entry is None:
            return False

        if entry.is_expired(self._clock()):
            self._otps.delete(email)
            self._passwords.delete(email)
            logger.info("OTP for %s expired", email)
            return False

        if not secrets.compare_digest(entry.value.encode(), code.encode()):
            return False

        # Single use; the staged password stays until the account exists
        self._otps.delete(email)
        return True

    def stage_password(self, email: str, password_hash: str) -> None:
        self._passwords.set(email, password_hash)

    def get_staged_password(self, email: str) -> Optional[str]:
        return self._passwords.get(email)

    def clear_staged_password(self, email: str) -> None:
        self._passwords.delete(email)

    def _purge_expired(self) -> None:
        expired = self._otps.purge_expired()
        for email in expired:
            self._passwords.delete(email)
        if expired:
            logger.debug("Purged %d expired OTPs", len(expired))
