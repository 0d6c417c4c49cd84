import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from app.core.errors import IdentityRequired, NotFoundOrDenied, StoreError, ValidationFailed
from app.core.rest_client import RestClient, get_rest_client
from app.core.security import get_current_user_id, get_password_hash, verify_password
from app.crud.owned import utc_now
from app.models.note import Note
from app.models.todo import Todo
from app.models.user import User
from app.schemas.user import PasswordChange, ProfileUpdate, UserProfile, UserStats

logger = logging.getLogger(__name__)

router = APIRouter()

USERS = User.__tablename__
PROFILE_FIELDS = "id,username,email,avatar,bio,join_date,last_updated"


async def own_profile_id(profile_id: int, user_id: int = Depends(get_current_user_id)) -> int:
    """Profiles are only visible to their owner; anyone else gets a 404"""
    if profile_id != user_id:
        raise NotFoundOrDenied("User not found")
    return profile_id


async def fetch_user(rest: RestClient, user_id: int, select: str = PROFILE_FIELDS) -> Dict[str, Any]:
    rows = await rest.query(USERS, select=select, filters={"id": user_id}, limit=1)
    if not rows:
        raise NotFoundOrDenied("User not found")
    return rows[0]


@router.get("/profile/{profile_id}", response_model=UserProfile)
async def get_profile(
    profile_id: int = Depends(own_profile_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Get user profile by ID"""
    return await fetch_user(rest, profile_id)


@router.put("/profile/{profile_id}", response_model=UserProfile)
async def update_profile(
    update: ProfileUpdate,
    profile_id: int = Depends(own_profile_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Update username, email, avatar or bio"""
    changes = update.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationFailed("No fields to update")

    # Username and email must stay unique across users
    for field in ("username", "email"):
        if changes.get(field):
            rows = await rest.query(USERS, select="id", filters={field: changes[field]})
            if any(row["id"] != profile_id for row in rows):
                raise ValidationFailed("Username or email already exists")

    await fetch_user(rest, profile_id, select="id")
    changes["last_updated"] = utc_now()
    updated = await rest.update(USERS, profile_id, changes)
    if updated is None:
        raise NotFoundOrDenied("User not found")
    return updated


@router.put("/profile/{profile_id}/password")
async def change_password(
    change: PasswordChange,
    profile_id: int = Depends(own_profile_id),
    rest: RestClient = Depends(get_rest_client),
):
    user = await fetch_user(rest, profile_id, select="id,password")
    if not verify_password(change.currentPassword, user.get("password")):
        raise IdentityRequired("Current password is incorrect")

    patch = {"password": get_password_hash(change.newPassword), "last_updated": utc_now()}
    updated = await rest.update(USERS, profile_id, patch)
    if updated is None:
        raise StoreError("Password update failed", details="User not found")
    logger.info("Password changed for user %s", profile_id)
    return {"message": "Password updated successfully"}


@router.get("/profile/{profile_id}/stats", response_model=UserStats)
async def get_stats(
    profile_id: int = Depends(own_profile_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Counts of the caller's notes and to-dos"""
    notes, todos, completed_todos, favorite_notes = await asyncio.gather(
        rest.count(Note.__tablename__, filters={"user_id": profile_id}),
        rest.count(Todo.__tablename__, filters={"user_id": profile_id, "is_deleted": False}),
        rest.count(
            Todo.__tablename__,
            filters={"user_id": profile_id, "is_deleted": False, "completed": True},
        ),
        rest.count(Note.__tablename__, filters={"user_id": profile_id, "is_favorite": True}),
    )
    return {
        "totalNotes": notes,
        "totalTodos": todos,
        "completedTodos": completed_todos,
        "favoriteNotes": favorite_notes,
    }
