from pydantic import BaseModel, Field


class MoodCreate(BaseModel):
    mood: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)


class MoodResponse(BaseModel):
    id: int
    mood: str
    date: str
    user_id: int
