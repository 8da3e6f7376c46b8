from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

STATUS_PATTERN = "^(pending|in-progress|completed)$"
PRIORITY_PATTERN = "^(low|medium|high)$"


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=10_000)
    status: str = Field(default="pending", pattern=STATUS_PATTERN)
    category: Optional[str] = Field(default=None, max_length=100)
    due_date: Optional[date] = None
    priority: Optional[str] = Field(default=None, pattern=PRIORITY_PATTERN)


class TaskUpdate(BaseModel):
    # partial: only fields present in the body are applied
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=10_000)
    status: Optional[str] = Field(default=None, pattern=STATUS_PATTERN)
    category: Optional[str] = Field(default=None, max_length=100)
    due_date: Optional[date] = None
    priority: Optional[str] = Field(default=None, pattern=PRIORITY_PATTERN)


class TaskOut(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str]
    status: str
    category: Optional[str]
    due_date: Optional[str]
    priority: Optional[str]
    created_at: str
    updated_at: str


class TaskStatsOut(BaseModel):
    total: int
    pending: int
    in_progress: int
    completed: int
