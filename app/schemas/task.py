from pydantic import BaseModel, Field
from typing import Optional


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    deadline: str = Field(..., min_length=1)
    description: Optional[str] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[str] = None
    is_completed: Optional[bool] = None


class TaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    deadline: Optional[str] = None
    is_completed: bool = False
    user_id: int
    created_at: Optional[str] = None


class TaskCreated(BaseModel):
    message: str
    taskId: int
    task: TaskResponse


class TaskUpdated(BaseModel):
    message: str
    task: TaskResponse
