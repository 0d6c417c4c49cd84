from pydantic import BaseModel, Field
from typing import Optional


class NoteFields(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    category: Optional[str] = None
    tags: Optional[str] = None
    priority: str = "Medium"
    is_favorite: bool = False


class NoteBase(NoteFields):
    audio_filename: Optional[str] = None
    audio_duration: Optional[float] = None
    audio_size: Optional[int] = None
    has_audio: bool = False


class NoteCreate(NoteBase):
    pass


class NoteUpdate(NoteFields):
    """Full replacement of the text fields; the attached recording is left as is"""


class FavoriteUpdate(BaseModel):
    is_favorite: bool = False


class NoteResponse(NoteBase):
    id: int
    user_id: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AudioUploadResponse(BaseModel):
    success: bool = True
    filename: str
    path: str
    url: str
    size: int
    type: str
