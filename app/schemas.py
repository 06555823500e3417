"""Request bodies for the auth and user-management endpoints."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

MIN_PASSWORD_LENGTH = 6


class SendOtpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=1)
    password: str


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    isVerified: Optional[bool] = None


class UpdateUserRequest(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=MIN_PASSWORD_LENGTH)
    isVerified: Optional[bool] = None
