"""
Unified relevance-ranked search over tasks and notes.

The engine asks its backend for substring matches of both kinds at once,
scores every candidate, and returns the best `limit` hits. It knows nothing
about where records live: guest and authenticated workspaces differ only in
the backend they hand it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from taskify.search.backends import SearchBackend
from taskify.search.scoring import score_relevance
from taskify.storage.records import Note, Task

logger = logging.getLogger(__name__)

MAX_RESULTS = 10

TASK = "task"
NOTE = "note"


class SearchFailed(Exception):
    """A store fetch failed; the search has no trustworthy result."""


@dataclass(frozen=True)
class SearchHit:
    kind: str
    record: Union[Task, Note]
    score: int

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "score": self.score, "record": self.record.to_dict()}


class SearchStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class SearchOutcome:
    status: SearchStatus
    query: str
    hits: tuple[SearchHit, ...] = field(default_factory=tuple)
    reason: Optional[str] = None

    @classmethod
    def ok(cls, query: str, hits: list[SearchHit]) -> "SearchOutcome":
        if not hits:
            return cls.empty(query)
        return cls(status=SearchStatus.OK, query=query, hits=tuple(hits))

    @classmethod
    def empty(cls, query: str) -> "SearchOutcome":
        return cls(status=SearchStatus.EMPTY, query=query)

    @classmethod
    def failed(cls, query: str, reason: str) -> "SearchOutcome":
        return cls(status=SearchStatus.ERROR, query=query, reason=reason)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "query": self.query,
            "status": self.status.value,
            "results": [h.to_dict() for h in self.hits],
        }
        if self.reason is not None:
            out["reason"] = self.reason
        return out


class UnifiedSearchEngine:
    def __init__(self, backend: SearchBackend, limit: int = MAX_RESULTS):
        self.backend = backend
        self.limit = limit

    async def search(self, query: str) -> list[SearchHit]:
        """
        Return at most `limit` hits sorted by descending score.

        Ties keep the order the stores returned them in, tasks before notes.
        Raises SearchFailed if either fetch fails.
        """
        term = query.strip()
        if not term:
            return []

        try:
            tasks, notes = await asyncio.gather(
                self.backend.search_tasks(term),
                self.backend.search_notes(term),
            )
        except Exception as exc:
            raise SearchFailed(str(exc) or exc.__class__.__name__) from exc

        hits = [SearchHit(TASK, t, score_relevance(term, t.title, t.description or "")) for t in tasks]
        hits.extend(SearchHit(NOTE, n, score_relevance(term, n.title, n.content)) for n in notes)

        ranked = sorted(hits, key=lambda h: h.score, reverse=True)[: self.limit]
        logger.debug("Search %r: %d tasks, %d notes, %d returned", term, len(tasks), len(notes), len(ranked))
        return ranked

    async def execute(self, query: str) -> SearchOutcome:
        """Run `search` and fold the result or failure into a SearchOutcome."""
        try:
            hits = await self.search(query)
        except SearchFailed as exc:
            logger.exception("Search %r failed", query)
            return SearchOutcome.failed(query.strip(), str(exc))
        return SearchOutcome.ok(query.strip(), hits)
