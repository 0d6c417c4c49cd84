from pydantic import BaseModel, Field
from typing import Optional


class EntryBase(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)


class EntryCreate(EntryBase):
    pass


class EntryUpdate(EntryBase):
    pass


class EntryResponse(BaseModel):
    id: int
    title: str
    content: str
    user_id: int
    created_at: Optional[str] = None
