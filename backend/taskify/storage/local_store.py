"""Guest-mode persistence: a per-profile key/value store of JSON arrays.

Layout: <APP_DATA_DIR>/guest/<profile>/<key>.json, one serialized array per
key ("taskify_tasks", "taskify_notes"). The profile directory is the only
scope; records carry the synthetic "guest" owner.

Routes run on a thread pool, so every load-modify-save holds the profile's
lock; files are replaced atomically from a unique temp file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import uuid
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

from taskify.analytics import task_stats
from taskify.storage.errors import StoreError
from taskify.storage.records import (
    GUEST_USER_ID,
    Note,
    Task,
    TaskStats,
    clean_note_changes,
    clean_task_changes,
    next_timestamp,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

TASKS_KEY = "taskify_tasks"
NOTES_KEY = "taskify_notes"

_profile_locks: dict[str, threading.RLock] = {}
_profile_locks_guard = threading.Lock()


def profile_lock(profile_dir: Path) -> threading.RLock:
    """One lock per profile directory, shared by every store opened on it."""
    key = str(profile_dir.resolve())
    with _profile_locks_guard:
        lock = _profile_locks.get(key)
        if lock is None:
            lock = _profile_locks[key] = threading.RLock()
        return lock


def safe_profile_dir(base_dir: Path, profile: str) -> Path:
    # profile comes from a request header; keep it out of parent dirs
    if not profile or any(ch in profile for ch in "/\\") or ".." in profile:
        raise ValueError("Invalid guest profile")
    return base_dir / profile


def _atomic_write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, prefix=path.name + ".", suffix=".tmp", delete=False
    ) as f:
        tmp_path = Path(f.name)
        try:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        except BaseException:
            f.close()
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)


class LocalStorage:
    def __init__(self, profile_dir: Path):
        self.profile_dir = profile_dir
        self.lock = profile_lock(profile_dir)

    def _path(self, key: str) -> Path:
        return self.profile_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[list[dict[str, Any]]]:
        p = self._path(key)
        if not p.exists():
            return None
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable local storage %s: %s", p, exc)
            raise StoreError(f"Local storage key {key!r} is unreadable") from exc
        if not isinstance(raw, list):
            raise StoreError(f"Local storage key {key!r} does not hold an array")
        return raw

    def set_item(self, key: str, value: list[dict[str, Any]]) -> None:
        try:
            _atomic_write_json(self._path(key), value)
        except OSError as exc:
            raise StoreError(f"Local storage key {key!r} could not be written") from exc


class LocalTasksStore:
    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def _load(self) -> list[Task]:
        out: list[Task] = []
        for raw in self.storage.get_item(TASKS_KEY) or []:
            if not isinstance(raw, dict) or "id" not in raw:
                continue
            out.append(Task.from_dict(raw))
        return out

    def _save(self, tasks: list[Task]) -> None:
        self.storage.set_item(TASKS_KEY, [t.to_dict() for t in tasks])

    def list_tasks(self, status: Optional[str] = None, category: Optional[str] = None) -> list[Task]:
        with self.storage.lock:
            tasks = self._load()
        if status is not None:
            tasks = [t for t in tasks if t.status == status]
        if category is not None:
            tasks = [t for t in tasks if t.category == category]
        return tasks

    def get_task(self, task_id: str) -> Optional[Task]:
        with self.storage.lock:
            tasks = self._load()
        for task in tasks:
            if task.id == str(task_id):
                return task
        return None

    def create_task(
        self,
        title: str,
        description: Optional[str] = None,
        status: str = "pending",
        category: Optional[str] = None,
        due_date: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> Task:
        fields = clean_task_changes({
            "title": title,
            "description": description,
            "status": status or "pending",
            "category": category,
            "due_date": due_date,
            "priority": priority,
        })
        now = utc_now_iso()
        task = Task(id=str(uuid.uuid4()), user_id=GUEST_USER_ID, created_at=now, updated_at=now, **fields)
        with self.storage.lock:
            tasks = self._load()
            tasks.insert(0, task)
            self._save(tasks)
        return task

    def update_task(self, task_id: str, changes: dict[str, Any]) -> Optional[Task]:
        fields = clean_task_changes(changes)
        with self.storage.lock:
            tasks = self._load()
            for i, task in enumerate(tasks):
                if task.id == str(task_id):
                    raw = task.to_dict()
                    raw.update(fields)
                    raw["updated_at"] = next_timestamp(task.updated_at)
                    tasks[i] = Task.from_dict(raw)
                    self._save(tasks)
                    return tasks[i]
        return None

    def delete_task(self, task_id: str) -> bool:
        with self.storage.lock:
            tasks = self._load()
            kept = [t for t in tasks if t.id != str(task_id)]
            if len(kept) == len(tasks):
                return False
            self._save(kept)
        return True

    def search_tasks(self, term: str) -> list[Task]:
        needle = term.lower()
        with self.storage.lock:
            tasks = self._load()
        return [
            t for t in tasks
            if needle in t.title.lower() or (t.description and needle in t.description.lower())
        ]

    def task_stats(self) -> TaskStats:
        with self.storage.lock:
            return task_stats(self._load())


class LocalNotesStore:
    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def _load(self) -> list[Note]:
        notes = [
            Note.from_dict(raw)
            for raw in self.storage.get_item(NOTES_KEY) or []
            if isinstance(raw, dict) and "id" in raw
        ]
        # pinned first, then most recently updated; both sorts are stable
        notes.sort(key=lambda n: n.updated_at, reverse=True)
        notes.sort(key=lambda n: not n.is_pinned)
        return notes

    def _save(self, notes: list[Note]) -> None:
        self.storage.set_item(NOTES_KEY, [n.to_dict() for n in notes])

    def _replace(
        self, note_id: str, changes: Union[dict[str, Any], Callable[[Note], dict[str, Any]]]
    ) -> Optional[Note]:
        with self.storage.lock:
            notes = self._load()
            for i, note in enumerate(notes):
                if note.id == str(note_id):
                    raw = note.to_dict()
                    raw.update(changes(note) if callable(changes) else changes)
                    raw["updated_at"] = next_timestamp(note.updated_at)
                    notes[i] = Note.from_dict(raw)
                    self._save(notes)
                    return notes[i]
        return None

    def list_notes(self, tag: Optional[str] = None) -> list[Note]:
        with self.storage.lock:
            notes = self._load()
        if tag is not None:
            notes = [n for n in notes if tag in n.tags]
        return notes

    def get_note(self, note_id: str) -> Optional[Note]:
        with self.storage.lock:
            notes = self._load()
        for note in notes:
            if note.id == str(note_id):
                return note
        return None

    def create_note(
        self,
        title: str,
        content: str = "",
        tags: Iterable[str] = (),
        is_pinned: bool = False,
    ) -> Note:
        fields = clean_note_changes({
            "title": title,
            "content": content,
            "tags": tags,
            "is_pinned": is_pinned,
        })
        now = utc_now_iso()
        note = Note(id=str(uuid.uuid4()), user_id=GUEST_USER_ID, created_at=now, updated_at=now, **fields)
        with self.storage.lock:
            notes = self._load()
            notes.insert(0, note)
            self._save(notes)
        return note

    def update_note(self, note_id: str, changes: dict[str, Any]) -> Optional[Note]:
        return self._replace(note_id, clean_note_changes(changes))

    def toggle_pin(self, note_id: str) -> Optional[Note]:
        # flip against the stored value, read under the same lock as the write
        return self._replace(note_id, lambda note: {"is_pinned": not note.is_pinned})

    def delete_note(self, note_id: str) -> bool:
        with self.storage.lock:
            notes = self._load()
            kept = [n for n in notes if n.id != str(note_id)]
            if len(kept) == len(notes):
                return False
            self._save(kept)
        return True

    def search_notes(self, term: str) -> list[Note]:
        needle = term.lower()
        with self.storage.lock:
            notes = self._load()
        return [
            n for n in notes
            if needle in n.title.lower()
            or needle in n.content.lower()
            or any(needle in tag.lower() for tag in n.tags)
        ]
