"""
FastAPI dependency providers for services and repositories.

Stateful pieces (the OTP store above all) are process-wide singletons via
lru_cache; request-scoped services are assembled from them per request.
Tests swap any provider through app.dependency_overrides.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.config import get_settings
from app.errors import ServiceUnavailableError
from app.repositories.activity import ActivityRepository
from app.repositories.users import UserRepository
from app.services.activity_logger import ActivityLogger
from app.services.auth_service import AuthService
from app.services.email_service import EmailService
from app.services.otp_service import OtpService
from app.services.passwords import PasswordHasher
from app.services.token_service import TokenService
from app.services.user_service import UserService


@lru_cache
def get_otp_service() -> OtpService:
    return OtpService()


@lru_cache
def get_user_repository() -> UserRepository:
    return UserRepository()


@lru_cache
def get_activity_repository() -> ActivityRepository:
    return ActivityRepository()


@lru_cache
def get_email_service() -> EmailService:
    return EmailService(get_settings())


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


def get_token_service() -> TokenService:
    settings = get_settings()
    if not settings.jwt_secret:
        raise ServiceUnavailableError("Authentication not configured (JWT_SECRET required).")
    return TokenService(settings.jwt_secret, settings.jwt_expires_in)


def get_activity_logger(
    repository: Annotated[ActivityRepository, Depends(get_activity_repository)],
) -> ActivityLogger:
    return ActivityLogger(repository)


def get_auth_service(
    users: Annotated[UserRepository, Depends(get_user_repository)],
    activity: Annotated[ActivityLogger, Depends(get_activity_logger)],
    otp: Annotated[OtpService, Depends(get_otp_service)],
    email: Annotated[EmailService, Depends(get_email_service)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(users=users, activity=activity, otp=otp, email=email, hasher=hasher, tokens=tokens)


def get_user_service(
    users: Annotated[UserRepository, Depends(get_user_repository)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> UserService:
    return UserService(users=users, hasher=hasher)
