"""
User management APIs (admin only).

GET    /users          list accounts with role "user"
GET    /users/{id}     one account
POST   /users          create an account directly (no OTP)
PATCH  /users/{id}     change email, password or verified flag
DELETE /users/{id}     remove an account
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from app.api.auth import require_role
from app.dependencies import get_user_service
from app.models.roles import Role
from app.models.user import User
from app.schemas import CreateUserRequest, UpdateUserRequest
from app.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter()

AdminUser = Annotated[User, Depends(require_role(Role.ADMIN))]
Users = Annotated[UserService, Depends(get_user_service)]


@router.get("", response_model=dict, summary="List users")
async def list_users(admin: AdminUser, service: Users) -> dict[str, Any]:
    users = await service.list_users()
    return {"users": [u.public_dict() for u in users]}


@router.get("/{user_id}", response_model=dict, summary="Get a user")
async def get_user(user_id: str, admin: AdminUser, service: Users) -> dict[str, Any]:
    user = await service.get_user(user_id)
    return user.public_dict()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=dict, summary="Create a user")
async def create_user(body: CreateUserRequest, admin: AdminUser, service: Users) -> dict[str, Any]:
    user = await service.create_user(body.email, body.password, body.isVerified)
    logger.info("Admin %s created user %s", admin.id, user.id)
    return user.public_dict()


@router.patch("/{user_id}", response_model=dict, summary="Update a user")
async def update_user(
    user_id: str,
    body: UpdateUserRequest,
    admin: AdminUser,
    service: Users,
) -> dict[str, Any]:
    user = await service.update_user(
        user_id,
        email=body.email,
        password=body.password,
        is_verified=body.isVerified,
    )
    return user.public_dict()


@router.delete("/{user_id}", response_model=dict, summary="Delete a user")
async def delete_user(user_id: str, admin: AdminUser, service: Users) -> dict[str, Any]:
    result = await service.delete_user(user_id)
    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return result
