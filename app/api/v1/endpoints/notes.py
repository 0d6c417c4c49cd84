import logging
import re
import time
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request, Response, status

from app.core.errors import StoreError, ValidationFailed
from app.core.http import audio_content_type, is_upload, parse_body, validate_body
from app.core.rest_client import RestClient, get_rest_client
from app.core.security import get_current_user_id
from app.core.storage import StorageClient, get_storage_client
from app.crud.owned import create_owned, delete_owned, get_owned, list_owned, update_owned, utc_now
from app.models.note import Note
from app.schemas.note import AudioUploadResponse, FavoriteUpdate, NoteCreate, NoteResponse, NoteUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

NOTES = Note.__tablename__
AUDIO_PREFIX = "audio"
EXTENSION_PATTERN = re.compile(r"[A-Za-z0-9]+")


def audio_filename(original_name: str) -> str:
    """``audio_<epoch ms>.<ext>``, keeping the uploaded extension when it is sane"""
    extension = original_name.rsplit(".", 1)[-1] if "." in original_name else ""
    if not EXTENSION_PATTERN.fullmatch(extension):
        extension = "webm"
    return f"audio_{int(time.time() * 1000)}.{extension.lower()}"


def audio_path(filename: str) -> str:
    return f"{AUDIO_PREFIX}/{filename}"


async def read_audio_field(body: Dict[str, Any]):
    audio = body.get("audio")
    if audio is None or audio == "":
        raise ValidationFailed("No audio file provided")
    if not is_upload(audio) or not audio.filename:
        raise ValidationFailed("Invalid file object")
    data = await audio.read()
    if not data:
        raise ValidationFailed("Invalid file object")
    return audio, data


async def store_audio(storage: StorageClient, original_name: str, data: bytes, content_type: str) -> Dict[str, Any]:
    filename = audio_filename(original_name)
    path = audio_path(filename)
    await storage.ensure_bucket()
    await storage.upload(path, data, content_type)
    return {
        "success": True,
        "filename": filename,
        "path": path,
        "url": storage.public_url(path),
        "size": len(data),
        "type": content_type,
    }


async def discard_audio(storage: StorageClient, filename: str) -> None:
    try:
        await storage.remove(audio_path(filename))
    except StoreError as e:
        logger.error("Could not remove audio %s: %s", filename, e.message)


@router.get("", response_model=List[NoteResponse])
async def get_notes(
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Get the caller's notes, newest first"""
    return await list_owned(rest, NOTES, user_id)


@router.get("/favorites", response_model=List[NoteResponse])
async def get_favorite_notes(
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    return await list_owned(rest, NOTES, user_id, filters={"is_favorite": True}, order_by="updated_at")


@router.get("/category/{category}", response_model=List[NoteResponse])
async def get_notes_by_category(
    category: str,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    return await list_owned(rest, NOTES, user_id, filters={"category": category})


@router.post("/upload-audio", response_model=AudioUploadResponse)
async def upload_audio(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    storage: StorageClient = Depends(get_storage_client),
):
    """Store a recording (multipart field ``audio``) and return its location"""
    audio, data = await read_audio_field(await parse_body(request))
    uploaded = await store_audio(storage, audio.filename, data, audio.content_type or "audio/webm")
    logger.info("User %s uploaded %s (%s bytes)", user_id, uploaded["filename"], uploaded["size"])
    return uploaded


@router.get("/audio/{filename}")
async def get_audio(filename: str, storage: StorageClient = Depends(get_storage_client)):
    """Stream a stored recording; content type follows the file extension"""
    if not filename or filename in (".", "..") or filename in ("audio", "notes"):
        raise ValidationFailed("Invalid filename")

    data = await storage.download(audio_path(filename))
    return Response(
        content=data,
        media_type=audio_content_type(filename),
        headers={
            "Cache-Control": "public, max-age=31536000",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET",
        },
    )


@router.post("/with-audio", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note_with_audio(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
    storage: StorageClient = Depends(get_storage_client),
):
    """Create a note and its recording from one multipart request.

    The blob is uploaded first; if the row insert then fails the blob is
    removed again before the error is returned.
    """
    body = await parse_body(request)
    fields = {key: value for key, value in body.items() if not is_upload(value)}
    note = validate_body(NoteCreate, fields, "Title and content are required")

    audio, data = await read_audio_field(body)
    uploaded = await store_audio(storage, audio.filename, data, audio.content_type or "audio/webm")

    record = note.model_dump()
    record.update(
        {
            "audio_filename": uploaded["filename"],
            "audio_size": uploaded["size"],
            "has_audio": True,
        }
    )
    try:
        return await create_owned(rest, NOTES, user_id, record)
    except StoreError:
        logger.warning("Note insert failed, removing uploaded audio %s", uploaded["filename"])
        await discard_audio(storage, uploaded["filename"])
        raise


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: int,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Get a specific note by ID"""
    return await get_owned(rest, NOTES, note_id, user_id, label="Note")


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    note: NoteCreate,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Create a new note"""
    return await create_owned(rest, NOTES, user_id, note.model_dump())


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: int,
    note: NoteUpdate,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    """Replace a note's text fields (only owner); audio fields are not touched"""
    patch = note.model_dump()
    patch["updated_at"] = utc_now()
    return await update_owned(rest, NOTES, note_id, user_id, patch, label="Note")


@router.patch("/{note_id}/favorite")
async def set_favorite(
    note_id: int,
    favorite: FavoriteUpdate,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
):
    patch = {"is_favorite": favorite.is_favorite, "updated_at": utc_now()}
    updated = await update_owned(rest, NOTES, note_id, user_id, patch, label="Note")
    return {"message": "Favorite status updated successfully", "is_favorite": updated["is_favorite"]}


@router.delete("/{note_id}")
async def delete_note(
    note_id: int,
    user_id: int = Depends(get_current_user_id),
    rest: RestClient = Depends(get_rest_client),
    storage: StorageClient = Depends(get_storage_client),
):
    """Delete a note (only owner) together with its recording"""
    note = await delete_owned(rest, NOTES, note_id, user_id, label="Note")
    if note.get("has_audio") and note.get("audio_filename"):
        await discard_audio(storage, note["audio_filename"])
    return {"message": "Note deleted successfully"}
