from typing import List

from fastapi import APIRouter, Depends, status

from app.core.rest_client import RestClient, get_rest_client
from app.core.security import get_current_user_id
from app.crud.owned import create_owned, delete_owned, get_owned, list_owned, update_owned
from app.models.entry import Entry
from app.schemas.entry import EntryCreate, EntryResponse, EntryUpdate

router = APIRouter()

ENTRIES = Entry.__tablename__


@router.get("", response_model=List[EntryResponse])
async def get_entries(
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Get the caller's diary entries, newest first"""
    return await list_owned(rest, ENTRIES, user_id)


@router.get("/{entry_id}", response_model=EntryResponse)
async def get_entry(
    entry_id: int,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    return await get_owned(rest, ENTRIES, entry_id, user_id, label="Entry")


@router.post("", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry: EntryCreate,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Create a new entry"""
    return await create_owned(rest, ENTRIES, user_id, entry.model_dump())


@router.put("/{entry_id}", response_model=EntryResponse)
async def update_entry(
    entry_id: int,
    entry: EntryUpdate,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Update an entry (only owner)"""
    return await update_owned(rest, ENTRIES, entry_id, user_id, entry.model_dump(), label="Entry")


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: int,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Delete an entry (only owner)"""
    await delete_owned(rest, ENTRIES, entry_id, user_id, label="Entry")
    return {"message": "Entry deleted successfully"}
