from typing import List

from fastapi import APIRouter, Depends, status

from app.core.rest_client import RestClient, get_rest_client
from app.core.security import get_current_user_id
from app.crud.owned import create_owned, delete_owned, list_owned
from app.models.mood import Mood
from app.schemas.mood import MoodCreate, MoodResponse

router = APIRouter()

MOODS = Mood.__tablename__


@router.get("", response_model=List[MoodResponse])
async def get_moods(
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    return await list_owned(rest, MOODS, user_id, order_by="date")


@router.post("", response_model=MoodResponse, status_code=status.HTTP_201_CREATED)
async def create_mood(
    mood: MoodCreate,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    return await create_owned(rest, MOODS, user_id, mood.model_dump())


@router.delete("/{mood_id}")
async def delete_mood(
    mood_id: int,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    await delete_owned(rest, MOODS, mood_id, user_id, label="Mood entry")
    return {"message": "Mood entry deleted successfully"}
