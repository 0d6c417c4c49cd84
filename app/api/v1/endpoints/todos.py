from typing import List

from fastapi import APIRouter, Depends, status

from app.core.errors import ValidationFailed
from app.core.rest_client import RestClient, get_rest_client
from app.core.security import get_current_user_id
from app.crud.owned import create_owned, delete_owned, list_owned, update_owned, utc_now
from app.models.todo import Todo
from app.schemas.todo import TodoCreate, TodoCreated, TodoResponse, TodoUpdate, TodoUpdated

router = APIRouter()

TODOS = Todo.__tablename__


@router.get("", response_model=List[TodoResponse])
async def get_todos(
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Active (not trashed) to-do items, newest first"""
    return await list_owned(rest, TODOS, user_id, filters={"is_deleted": False})


@router.get("/trash", response_model=List[TodoResponse])
async def get_trash(
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Trashed to-do items, most recently deleted first"""
    return await list_owned(
        rest, TODOS, user_id, filters={"is_deleted": True}, order_by="deleted_at"
    )


@router.post("", response_model=TodoCreated, status_code=status.HTTP_201_CREATED)
async def create_todo(
    todo: TodoCreate,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    record = todo.model_dump()
    record.update({"is_deleted": False, "deleted_at": None})
    new_todo = await create_owned(rest, TODOS, user_id, record)
    return {"message": "To-Do item created", "todoId": new_todo["id"], "todo": new_todo}


@router.put("/{todo_id}", response_model=TodoUpdated)
async def update_todo(
    todo_id: int,
    todo: TodoUpdate,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Partial update; at least one field must be sent"""
    patch = todo.model_dump(exclude_unset=True)
    if not patch:
        raise ValidationFailed("At least one field is required for update")
    updated = await update_owned(rest, TODOS, todo_id, user_id, patch, label="To-Do item")
    return {"message": "To-Do item updated successfully", "todo": updated}


@router.put("/{todo_id}/restore")
async def restore_todo(
    todo_id: int,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Move a trashed item back to the active list"""
    await update_owned(
        rest,
        TODOS,
        todo_id,
        user_id,
        {"is_deleted": False, "deleted_at": None},
        filters={"is_deleted": True},
        label="To-Do item in trash",
    )
    return {"message": "To-Do item restored successfully"}


@router.delete("/{todo_id}")
async def trash_todo(
    todo_id: int,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Soft delete: the item moves to the trash"""
    await update_owned(
        rest,
        TODOS,
        todo_id,
        user_id,
        {"is_deleted": True, "deleted_at": utc_now()},
        label="To-Do item",
    )
    return {"message": "To-Do item moved to trash successfully"}


@router.delete("/{todo_id}/permanent")
async def delete_todo_permanently(
    todo_id: int,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Hard delete; only items already in the trash"""
    await delete_owned(
        rest, TODOS, todo_id, user_id, filters={"is_deleted": True}, label="To-Do item in trash"
    )
    return {"message": "To-Do item permanently deleted"}
