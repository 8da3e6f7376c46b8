from __future__ import annotations

import asyncio
from typing import Protocol

from taskify.storage.records import Note, Task


class TaskSearcher(Protocol):
    def search_tasks(self, term: str) -> list[Task]: ...


class NoteSearcher(Protocol):
    def search_notes(self, term: str) -> list[Note]: ...


class SearchBackend(Protocol):
    """What the search engine needs from a pair of record stores."""

    async def search_tasks(self, term: str) -> list[Task]: ...

    async def search_notes(self, term: str) -> list[Note]: ...


class StoreSearchBackend:
    """
    Search over a task store and a note store of one workspace.

    Both store families block (row-store queries, JSON file reads), so each
    query runs on a worker thread and the two can overlap.
    """

    def __init__(self, tasks: TaskSearcher, notes: NoteSearcher):
        self.tasks = tasks
        self.notes = notes

    async def search_tasks(self, term: str) -> list[Task]:
        return await asyncio.to_thread(self.tasks.search_tasks, term)

    async def search_notes(self, term: str) -> list[Note]:
        return await asyncio.to_thread(self.notes.search_notes, term)
