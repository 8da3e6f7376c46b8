from typing import Optional

from pydantic import BaseModel, Field


class NoteCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(default="", max_length=50_000)
    tags: list[str] = Field(default_factory=list, max_length=50)
    is_pinned: bool = False


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, max_length=50_000)
    tags: Optional[list[str]] = Field(default=None, max_length=50)
    is_pinned: Optional[bool] = None


class NoteOut(BaseModel):
    id: str
    user_id: str
    title: str
    content: str
    tags: list[str]
    is_pinned: bool
    created_at: str
    updated_at: str
