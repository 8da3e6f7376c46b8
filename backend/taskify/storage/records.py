from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional

TASK_STATUSES = ("pending", "in-progress", "completed")
TASK_PRIORITIES = ("low", "medium", "high")

GUEST_USER_ID = "guest"

TASK_MUTABLE_FIELDS = ("title", "description", "status", "category", "due_date", "priority")
NOTE_MUTABLE_FIELDS = ("title", "content", "tags", "is_pinned")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def next_timestamp(previous: Optional[str]) -> str:
    """Return a stamp strictly later than `previous` (clock may not have moved)."""
    now = datetime.now(timezone.utc)
    if previous:
        try:
            prev = datetime.fromisoformat(previous)
        except ValueError:
            prev = None
        if prev is not None and prev.tzinfo is not None and now <= prev:
            now = prev + timedelta(microseconds=1)
    return now.isoformat(timespec="microseconds")


def normalize_tags(tags: Optional[Iterable[str]]) -> tuple[str, ...]:
    if not tags:
        return ()
    out = []
    for tag in tags:
        if tag is None:
            continue
        t = str(tag).strip()
        if t:
            out.append(t)
    return tuple(out)


def _require_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValueError("Title is required")
    return title


def clean_task_changes(changes: dict[str, Any]) -> dict[str, Any]:
    """Keep only mutable task keys and validate their values."""
    out = {k: v for k, v in changes.items() if k in TASK_MUTABLE_FIELDS}
    if "title" in out:
        _require_title(out["title"])
    if "status" in out and out["status"] not in TASK_STATUSES:
        raise ValueError(f"Invalid status: {out['status']!r}")
    if "priority" in out and out["priority"] is not None and out["priority"] not in TASK_PRIORITIES:
        raise ValueError(f"Invalid priority: {out['priority']!r}")
    if out.get("due_date") is not None:
        out["due_date"] = str(out["due_date"])
    return out


def clean_note_changes(changes: dict[str, Any]) -> dict[str, Any]:
    """Keep only mutable note keys and validate their values."""
    out = {k: v for k, v in changes.items() if k in NOTE_MUTABLE_FIELDS}
    if "title" in out:
        _require_title(out["title"])
    if "content" in out and out["content"] is None:
        out["content"] = ""
    for key in ("tags", "is_pinned"):
        if key in out and out[key] is None:
            raise ValueError(f"{key} must not be null")
    if "tags" in out:
        out["tags"] = normalize_tags(out["tags"])
    if "is_pinned" in out:
        out["is_pinned"] = bool(out["is_pinned"])
    return out


@dataclass(frozen=True)
class Task:
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

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "category": self.category,
            "due_date": self.due_date,
            "priority": self.priority,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Task":
        # local storage may hold partial records; fill the gaps
        return cls(
            id=str(raw["id"]),
            user_id=raw.get("user_id") or GUEST_USER_ID,
            title=raw.get("title") or "",
            description=raw.get("description"),
            status=raw.get("status") or "pending",
            category=raw.get("category"),
            due_date=raw.get("due_date"),
            priority=raw.get("priority"),
            created_at=raw.get("created_at") or "",
            updated_at=raw.get("updated_at") or raw.get("created_at") or "",
        )


@dataclass(frozen=True)
class Note:
    id: str
    user_id: str
    title: str
    content: str
    created_at: str
    updated_at: str
    tags: tuple[str, ...] = field(default_factory=tuple)
    is_pinned: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
            "is_pinned": self.is_pinned,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Note":
        return cls(
            id=str(raw["id"]),
            user_id=raw.get("user_id") or GUEST_USER_ID,
            title=raw.get("title") or "",
            content=raw.get("content") or "",
            tags=normalize_tags(raw.get("tags")),
            is_pinned=bool(raw.get("is_pinned", False)),
            created_at=raw.get("created_at") or "",
            updated_at=raw.get("updated_at") or raw.get("created_at") or "",
        )


@dataclass(frozen=True)
class TaskStats:
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "pending": self.pending,
            "in_progress": self.in_progress,
            "completed": self.completed,
        }
