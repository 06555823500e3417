"""
Sign-up, sign-in and sign-out flows.

Sign-up is two requests:
    send_otp    -> check email is free, hash + stage password, mail a code
    verify_otp  -> check the code, create the account from the staged hash,
                   return a bearer token
Sign-in checks the password, stamps last_login_at and returns a token.

Activity logging after sign-up and sign-in is best effort: a failure there is
logged as a warning and the caller still gets their token. Sign-out has no
other effect, so there a logging failure is reported.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional

from app.errors import AppError, ConflictError, InternalError, UnauthorizedError
from app.models.activity import ActivityType
from app.models.user import User
from app.repositories.users import UserRepository
from app.services.activity_logger import ActivityLogger
from app.services.email_service import EmailService
from app.services.otp_service import OtpService
from app.services.passwords import PasswordHasher
from app.services.token_service import TokenService
from app.utils import utcnow

logger = logging.getLogger(__name__)

OTP_SENT_MESSAGE = "OTP sent successfully to your email"
SIGNED_IN_MESSAGE = "User signed in successfully"
SIGNED_OUT_MESSAGE = "Signed out successfully"


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        activity: ActivityLogger,
        otp: OtpService,
        email: EmailService,
        hasher: PasswordHasher,
        tokens: TokenService,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._users = users
        self._activity = activity
        self._otp = otp
        self._email = email
        self._hasher = hasher
        self._tokens = tokens
        self._clock = clock

    async def send_otp(self, email: str, password: str) -> dict[str, str]:
        try:
            if await self._users.get_by_email(email):
                raise ConflictError("User with this email already exists")

            password_hash = await asyncio.to_thread(self._hasher.hash_password, password)
            code = self._otp.generate_code()
            self._otp.store(email, code)
            self._otp.stage_password(email, password_hash)

            await self._email.send_otp(email, code)
        except ConflictError:
            raise
        except Exception as e:
            logger.exception("Error sending OTP to %s", email)
            raise InternalError("Failed to send OTP") from e

        logger.info("OTP issued for %s", email)
        return {"message": OTP_SENT_MESSAGE}

    async def verify_otp(self, email: str, otp: str, password: str) -> dict[str, Any]:
        # password is accepted for API compatibility; the hash staged by send_otp is authoritative
        if not self._otp.verify(email, otp):
            raise UnauthorizedError("Invalid or expired OTP")

        if await self._users.get_by_email(email):
            raise ConflictError("User already exists. Please use sign-in endpoint instead.")

        password_hash = self._otp.get_staged_password(email)
        if not password_hash:
            raise UnauthorizedError("Password not found. Please try signing up again.")

        user = await self.create_or_update_user(email, password_hash)
        self._otp.clear_staged_password(email)
        logger.info("New user %s created for %s", user.id, email)

        await self._log_best_effort(user, ActivityType.SIGN_UP)

        return {
            "accessToken": self._tokens.issue(user.id, user.email),
            "user": user.summary(),
        }

    async def sign_in(self, email: str, password: str) -> dict[str, Any]:
        user = await self._users.get_by_email(email)
        if not user:
            raise UnauthorizedError("User not found. Please sign up first.")
        if not user.password:
            raise UnauthorizedError("Password not set. Please reset your password.")

        valid = await asyncio.to_thread(self._hasher.verify_password, password, user.password)
        if not valid:
            raise UnauthorizedError("Invalid email or password")

        user = await self.create_or_update_user(email)
        logger.info("User %s signed in", user.id)

        await self._log_best_effort(user, ActivityType.SIGN_IN)

        return {
            "accessToken": self._tokens.issue(user.id, user.email),
            "user": user.summary(),
            "message": SIGNED_IN_MESSAGE,
        }

    async def sign_out(self, user: User) -> dict[str, str]:
        try:
            await self._activity.record(user.id, user.email, ActivityType.SIGN_OUT)
        except AppError:
            raise
        except Exception as e:
            logger.exception("Failed to log sign-out for user %s", user.id)
            raise InternalError("Failed to sign out") from e
        return {"message": SIGNED_OUT_MESSAGE}

    async def create_or_update_user(self, email: str, password_hash: Optional[str] = None) -> User:
        """
        Mark the account with this email as verified and just logged in,
        creating it if needed. A new password hash replaces the stored one.
        """
        now = self._clock()
        existing = await self._users.get_by_email(email)

        if existing:
            fields: dict[str, Any] = {"is_verified": True, "updated_at": now, "last_login_at": now}
            if password_hash:
                fields["password"] = password_hash
            updated = await self._users.update(existing.id, fields)
            if updated is None:
                raise InternalError("User disappeared during update")
            return updated

        return await self._users.create(
            User(
                email=email,
                password=password_hash,
                is_verified=True,
                created_at=now,
                updated_at=now,
                last_login_at=now,
            )
        )

    async def _log_best_effort(self, user: User, activity_type: ActivityType) -> None:
        try:
            await self._activity.record(user.id, user.email, activity_type)
        except Exception as e:
            logger.warning("Failed to log %s activity for user %s (non-critical): %s", activity_type.value, user.id, e)
