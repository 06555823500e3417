"""
Authentication endpoints and the current-user dependency.

POST /auth/send-otp     sign-up step 1: mail a one-time code
POST /auth/verify-otp   sign-up step 2: check the code, create the account
POST /auth/sign-in      email + password
POST /auth/sign-out     bearer token required
GET  /auth/admin/test   bearer token with admin role required

Bearer tokens are HS256 JWTs issued by this service; the subject is the
MongoDB id of the user, which must still exist.
"""

import logging
from typing import Annotated, Any, Awaitable, Callable

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.dependencies import get_auth_service, get_token_service, get_user_repository
from app.errors import ForbiddenError, UnauthorizedError
from app.models.roles import Role, is_allowed
from app.models.user import User
from app.repositories.users import UserRepository
from app.schemas import SendOtpRequest, SignInRequest, VerifyOtpRequest
from app.services.auth_service import AuthService
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)
router = APIRouter()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> User:
    """Dependency: validate the bearer token and return the User it names."""
    if credentials is None:
        raise UnauthorizedError("Not authenticated")

    payload = tokens.decode(credentials.credentials)
    user = await users.get_by_id(payload["sub"])
    if not user:
        logger.warning("Token subject %s no longer exists", payload["sub"])
        raise UnauthorizedError("User not found")
    return user


def require_role(required: Role) -> Callable[..., Awaitable[User]]:
    """Dependency factory: the current user, if their role satisfies `required`."""

    async def checker(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if not is_allowed(required, current_user.role):
            raise ForbiddenError("Insufficient permissions")
        return current_user

    return checker


@router.post("/send-otp", response_model=dict, summary="Sign up: send OTP")
async def send_otp(
    body: SendOtpRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    return await auth.send_otp(body.email, body.password)


@router.post("/verify-otp", response_model=dict, summary="Sign up: verify OTP and create account")
async def verify_otp(
    body: VerifyOtpRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    return await auth.verify_otp(body.email, body.otp, body.password)


@router.post("/sign-in", response_model=dict, summary="Sign in with email and password")
async def sign_in(
    body: SignInRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    return await auth.sign_in(body.email, body.password)


@router.post("/sign-out", response_model=dict, summary="Sign out")
async def sign_out(
    current_user: Annotated[User, Depends(get_current_user)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    return await auth.sign_out(current_user)


@router.get("/admin/test", response_model=dict, summary="Admin-only check")
async def admin_test(
    current_user: Annotated[User, Depends(require_role(Role.ADMIN))],
) -> dict[str, Any]:
    return {"message": "Admin access granted", "user": current_user.public_dict()}
