"""The task/note stores a request works against, guest or authenticated."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from taskify import config
from taskify.search.backends import SearchBackend, StoreSearchBackend
from taskify.search.engine import UnifiedSearchEngine
from taskify.storage.db import get_session_factory
from taskify.storage.local_store import LocalNotesStore, LocalStorage, LocalTasksStore, safe_profile_dir
from taskify.storage.notes_store import NotesStore
from taskify.storage.records import GUEST_USER_ID
from taskify.storage.tasks_store import TasksStore

AnyTasksStore = Union[TasksStore, LocalTasksStore]
AnyNotesStore = Union[NotesStore, LocalNotesStore]


@dataclass(frozen=True)
class Workspace:
    owner: str
    tasks: AnyTasksStore
    notes: AnyNotesStore
    search_backend: SearchBackend

    def search_engine(self) -> UnifiedSearchEngine:
        return UnifiedSearchEngine(self.search_backend)


def user_workspace(user_id: str) -> Workspace:
    session_factory = get_session_factory(config.database_url())
    tasks = TasksStore(session_factory, user_id)
    notes = NotesStore(session_factory, user_id)
    return Workspace(
        owner=user_id,
        tasks=tasks,
        notes=notes,
        search_backend=StoreSearchBackend(tasks, notes),
    )


def guest_workspace(profile: str) -> Workspace:
    storage = LocalStorage(safe_profile_dir(config.guest_dir(), profile))
    tasks = LocalTasksStore(storage)
    notes = LocalNotesStore(storage)
    return Workspace(
        owner=GUEST_USER_ID,
        tasks=tasks,
        notes=notes,
        search_backend=StoreSearchBackend(tasks, notes),
    )
