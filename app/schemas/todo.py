from pydantic import BaseModel, Field
from typing import Optional


class TodoCreate(BaseModel):
    text: str = Field(..., min_length=1)
    completed: bool = False
    expiry_date: Optional[str] = None


class TodoUpdate(BaseModel):
    text: Optional[str] = None
    completed: Optional[bool] = None
    expiry_date: Optional[str] = None
    is_deleted: Optional[bool] = None
    deleted_at: Optional[str] = None


class TodoResponse(BaseModel):
    id: int
    text: str
    completed: bool = False
    is_deleted: bool = False
    deleted_at: Optional[str] = None
    expiry_date: Optional[str] = None
    user_id: int
    created_at: Optional[str] = None


class TodoCreated(BaseModel):
    message: str
    todoId: int
    todo: TodoResponse


class TodoUpdated(BaseModel):
    message: str
    todo: TodoResponse
