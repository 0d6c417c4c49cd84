from typing import List

from fastapi import APIRouter, Depends, status

from app.core.errors import ValidationFailed
from app.core.rest_client import RestClient, get_rest_client
from app.core.security import get_current_user_id
from app.crud.owned import create_owned, delete_owned, list_owned, update_owned
from app.models.task import Task
from app.schemas.task import TaskCreate, TaskCreated, TaskResponse, TaskUpdate, TaskUpdated

router = APIRouter()

TASKS = Task.__tablename__


@router.get("", response_model=List[TaskResponse])
async def get_tasks(
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Tasks ordered by deadline, soonest first"""
    return await list_owned(rest, TASKS, user_id, order_by="deadline", ascending=True)


@router.post("", response_model=TaskCreated, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    record = task.model_dump()
    record["is_completed"] = False
    new_task = await create_owned(rest, TASKS, user_id, record)
    return {"message": "Task created", "taskId": new_task["id"], "task": new_task}


@router.put("/{task_id}", response_model=TaskUpdated)
async def update_task(
    task_id: int,
    task: TaskUpdate,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    patch = task.model_dump(exclude_unset=True)
    if not patch:
        raise ValidationFailed("At least one field is required for update")
    updated = await update_owned(rest, TASKS, task_id, user_id, patch, label="Task")
    return {"message": "Task updated successfully", "task": updated}


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    await delete_owned(rest, TASKS, task_id, user_id, label="Task")
    return {"message": "Task deleted successfully"}
