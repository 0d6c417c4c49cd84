from .user import UserPublic, UserProfile, ProfileUpdate, PasswordChange, UserStats
from .auth import (
    LoginRequest, RegisterRequest, ForgotPasswordRequest, RefreshRequest,
    Token, LoginResponse, RegisterResponse,
)
from .entry import EntryCreate, EntryUpdate, EntryResponse
from .todo import TodoCreate, TodoUpdate, TodoResponse, TodoCreated, TodoUpdated
from .task import TaskCreate, TaskUpdate, TaskResponse, TaskCreated, TaskUpdated
from .mood import MoodCreate, MoodResponse
from .note import NoteCreate, NoteUpdate, NoteResponse, FavoriteUpdate, AudioUploadResponse

__all__ = [
    "UserPublic", "UserProfile", "ProfileUpdate", "PasswordChange", "UserStats",
    "LoginRequest", "RegisterRequest", "ForgotPasswordRequest", "RefreshRequest",
    "Token", "LoginResponse", "RegisterResponse",
    "EntryCreate", "EntryUpdate", "EntryResponse",
    "TodoCreate", "TodoUpdate", "TodoResponse", "TodoCreated", "TodoUpdated",
    "TaskCreate", "TaskUpdate", "TaskResponse", "TaskCreated", "TaskUpdated",
    "MoodCreate", "MoodResponse",
    "NoteCreate", "NoteUpdate", "NoteResponse", "FavoriteUpdate", "AudioUploadResponse",
]
