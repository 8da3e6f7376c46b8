from __future__ import annotations

import contextlib
import logging
from typing import Any, Iterable, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from taskify.storage.db import LIKE_ESCAPE, NoteRow, NoteTagRow, contains_pattern, session_scope
from taskify.storage.errors import StoreError
from taskify.storage.records import (
    Note,
    clean_note_changes,
    next_timestamp,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


def _to_note(row: NoteRow) -> Note:
    return Note(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        content=row.content or "",
        tags=tuple(t.tag for t in row.tag_rows),
        is_pinned=bool(row.is_pinned),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _tag_rows(tags: Iterable[str]) -> list[NoteTagRow]:
    return [NoteTagRow(position=i, tag=tag) for i, tag in enumerate(tags)]


class NotesStore:
    """Notes of one user in the row-store. Every query is owner-scoped."""

    def __init__(self, session_factory: sessionmaker, user_id: str):
        if not user_id:
            raise ValueError("Invalid user_id")
        self.session_factory = session_factory
        self.user_id = user_id

    @contextlib.contextmanager
    def _session(self):
        try:
            with session_scope(self.session_factory) as session:
                yield session
        except SQLAlchemyError as exc:
            raise StoreError("Note store unavailable") from exc

    def _owned(self):
        return select(NoteRow).where(NoteRow.user_id == self.user_id)

    def _get_row(self, session: Session, note_id: str) -> Optional[NoteRow]:
        return session.scalars(self._owned().where(NoteRow.id == str(note_id))).first()

    def list_notes(self, tag: Optional[str] = None) -> list[Note]:
        stmt = self._owned()
        if tag is not None:
            stmt = stmt.where(NoteRow.tag_rows.any(NoteTagRow.tag == tag))
        stmt = stmt.order_by(NoteRow.is_pinned.desc(), NoteRow.updated_at.desc(), NoteRow.id)
        with self._session() as session:
            return [_to_note(row) for row in session.scalars(stmt)]

    def get_note(self, note_id: str) -> Optional[Note]:
        with self._session() as session:
            row = self._get_row(session, note_id)
            return _to_note(row) if row is not None else None

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
        row = NoteRow(
            user_id=self.user_id,
            title=fields["title"],
            content=fields["content"],
            is_pinned=fields["is_pinned"],
            created_at=now,
            updated_at=now,
        )
        row.tag_rows = _tag_rows(fields["tags"])
        with self._session() as session:
            session.add(row)
            session.flush()
            note = _to_note(row)
        logger.info("Note %s created for %s", note.id, self.user_id)
        return note

    def update_note(self, note_id: str, changes: dict[str, Any]) -> Optional[Note]:
        fields = clean_note_changes(changes)
        with self._session() as session:
            row = self._get_row(session, note_id)
            if row is None:
                return None
            tags = fields.pop("tags", None)
            for key, value in fields.items():
                setattr(row, key, value)
            if tags is not None:
                # drop old positions before reusing their keys
                row.tag_rows.clear()
                session.flush()
                row.tag_rows.extend(_tag_rows(tags))
            row.updated_at = next_timestamp(row.updated_at)
            session.flush()
            return _to_note(row)

    def toggle_pin(self, note_id: str) -> Optional[Note]:
        with self._session() as session:
            row = self._get_row(session, note_id)
            if row is None:
                return None
            row.is_pinned = not row.is_pinned
            row.updated_at = next_timestamp(row.updated_at)
            session.flush()
            return _to_note(row)

    def delete_note(self, note_id: str) -> bool:
        with self._session() as session:
            row = self._get_row(session, note_id)
            if row is None:
                return False
            session.delete(row)
        logger.info("Note %s deleted for %s", note_id, self.user_id)
        return True

    def search_notes(self, term: str) -> list[Note]:
        """Case-insensitive literal substring match over title, content and tags."""
        pattern = contains_pattern(term)
        stmt = (
            self._owned()
            .where(or_(
                NoteRow.title.ilike(pattern, escape=LIKE_ESCAPE),
                NoteRow.content.ilike(pattern, escape=LIKE_ESCAPE),
                NoteRow.tag_rows.any(NoteTagRow.tag.ilike(pattern, escape=LIKE_ESCAPE)),
            ))
            .order_by(NoteRow.updated_at.desc(), NoteRow.id)
        )
        with self._session() as session:
            return [_to_note(row) for row in session.scalars(stmt)]
