from pydantic import BaseModel, Field, StringConstraints, field_validator
from typing import Annotated, Optional

NonEmptyText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class UserPublic(BaseModel):
    id: int
    username: str
    email: str


class UserProfile(UserPublic):
    avatar: Optional[str] = None
    bio: Optional[str] = None
    join_date: Optional[str] = None
    last_updated: Optional[str] = None


class ProfileUpdate(BaseModel):
    username: Optional[NonEmptyText] = None
    email: Optional[NonEmptyText] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None

    @field_validator("username", "email")
    @classmethod
    def not_null(cls, value):
        # the columns are NOT NULL; omit the field to leave it unchanged
        if value is None:
            raise ValueError("must not be null")
        return value


class PasswordChange(BaseModel):
    currentPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=1)


class UserStats(BaseModel):
    totalNotes: int
    totalTodos: int
    completedTodos: int
    favoriteNotes: int
