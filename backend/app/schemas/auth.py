"""Schemas for authentication endpoints."""

from __future__ import annotations

from pydantic import EmailStr, Field, constr

from app.schemas.common import APIModel
from app.schemas.users import Location

Username = constr(strip_whitespace=True, min_length=3, max_length=20)
Password = constr(min_length=6, max_length=128)


class RegisterRequest(APIModel):
    username: Username = Field(..., description="Unique name of 3-20 characters")
    email: EmailStr
    password: Password


class LoginRequest(APIModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenUser(APIModel):
    id: int
    username: str
    email: str
    profile_picture: str = Field(validation_alias="avatar_url", serialization_alias="profilePicture")


class TokenResponse(APIModel):
    """Access token returned after registration, login or a password change."""

    success: bool = True
    token: str
    user: TokenUser


class DetailsUpdate(APIModel):
    username: Username | None = None
    email: EmailStr | None = None
    bio: constr(max_length=250) | None = None
    interests: list[constr(strip_whitespace=True, min_length=1, max_length=64)] | None = None
    location: Location | None = None


class PasswordUpdate(APIModel):
    current_password: str = Field(..., min_length=1)
    new_password: Password


class ForgotPasswordRequest(APIModel):
    email: EmailStr


class ForgotPasswordResponse(APIModel):
    success: bool = True
    reset_token: str


class ResetPasswordRequest(APIModel):
    password: Password
