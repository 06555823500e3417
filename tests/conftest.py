"""Shared fixtures: services wired to in-memory fakes and a controllable clock."""

import pytest
from fastapi.testclient import TestClient

from app.dependencies import (
    get_activity_repository,
    get_email_service,
    get_otp_service,
    get_password_hasher,
    get_token_service,
    get_user_repository,
)
from app.main import create_application
from app.services.activity_logger import ActivityLogger
from app.services.auth_service import AuthService
from app.services.otp_service import OtpService
from app.services.passwords import PasswordHasher
from app.services.token_service import TokenService
from app.services.user_service import UserService
from tests.fakes import FakeClock, FakeEmailService, InMemoryActivityRepository, InMemoryUserRepository

TEST_SECRET = "test-signing-key-0123456789abcdef0123456789"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def users_repo():
    return InMemoryUserRepository()


@pytest.fixture
def activity_repo():
    return InMemoryActivityRepository()


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def otp_service(clock):
    return OtpService(clock=clock)


@pytest.fixture
def hasher():
    # Minimum cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return TokenService(TEST_SECRET)


@pytest.fixture
def activity_logger(activity_repo, clock):
    return ActivityLogger(activity_repo, clock=clock)


@pytest.fixture
def auth_service(users_repo, activity_logger, otp_service, email_service, hasher, tokens, clock):
    return AuthService(
        users=users_repo,
        activity=activity_logger,
        otp=otp_service,
        email=email_service,
        hasher=hasher,
        tokens=tokens,
        clock=clock,
    )


@pytest.fixture
def user_service(users_repo, hasher, clock):
    return UserService(users=users_repo, hasher=hasher, clock=clock)


@pytest.fixture
def client(users_repo, activity_repo, otp_service, email_service, hasher, tokens):
    app = create_application()
    app.dependency_overrides[get_user_repository] = lambda: users_repo
    app.dependency_overrides[get_activity_repository] = lambda: activity_repo
    app.dependency_overrides[get_otp_service] = lambda: otp_service
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_token_service] = lambda: tokens
    # No context manager: lifespan (MongoDB connect) is skipped
    return TestClient(app)
