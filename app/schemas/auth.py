from pydantic import BaseModel, Field, model_validator
from typing import Optional

from .user import NonEmptyText, UserPublic


class LoginRequest(BaseModel):
    """Username or email plus password; usernames stay case sensitive"""

    username: Optional[NonEmptyText] = None
    email: Optional[NonEmptyText] = None
    password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def username_or_email(self):
        if not (self.username or self.email):
            raise ValueError("username or email is required")
        return self


class RegisterRequest(BaseModel):
    username: NonEmptyText
    email: NonEmptyText
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: NonEmptyText
    newPassword: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: NonEmptyText


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    message: str
    success: bool = True
    token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user: UserPublic


class RegisterResponse(BaseModel):
    message: str
    success: bool = True
    user: UserPublic
