"""Row-store schema and engine/session plumbing for authenticated users.

Use as:
    session_factory = get_session_factory(config.database_url())
    with session_scope(session_factory) as session:
        ...
"""

from __future__ import annotations

import contextlib
import functools
import logging
import threading
import uuid
from pathlib import Path

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from taskify.storage.records import utc_now_iso

logger = logging.getLogger(__name__)

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class UserRow(Base):
    __tablename__ = "users"

    user_id = Column(String(64), primary_key=True)
    hashed_password = Column(String, nullable=False)
    created_at = Column(String(40), nullable=False, default=utc_now_iso)


class TaskRow(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="pending")
    category = Column(String(100), nullable=True)
    due_date = Column(String(10), nullable=True)  # YYYY-MM-DD
    priority = Column(String(8), nullable=True)
    created_at = Column(String(40), nullable=False, default=utc_now_iso)
    updated_at = Column(String(40), nullable=False, default=utc_now_iso)


class NoteRow(Base):
    __tablename__ = "notes"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False, default="")
    is_pinned = Column(Boolean, nullable=False, default=False)
    created_at = Column(String(40), nullable=False, default=utc_now_iso)
    updated_at = Column(String(40), nullable=False, default=utc_now_iso)

    tag_rows = relationship(
        "NoteTagRow",
        order_by="NoteTagRow.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class NoteTagRow(Base):
    """One tag of a note; `position` keeps the user's tag order."""
    __tablename__ = "note_tags"

    note_id = Column(String(36), ForeignKey("notes.id", ondelete="CASCADE"), primary_key=True)
    position = Column(Integer, primary_key=True)
    tag = Column(String(100), nullable=False, index=True)


LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """LIKE pattern matching `term` as a literal substring."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _ensure_sqlite_dir(url: str) -> None:
    prefix = "sqlite:///"
    if url.startswith(prefix) and ":memory:" not in url:
        Path(url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


_engines: dict[str, Engine] = {}
_lock = threading.Lock()


def get_engine(url: str) -> Engine:
    with _lock:
        engine = _engines.get(url)
        if engine is None:
            connect_args = {}
            if url.startswith("sqlite"):
                # searches run on worker threads
                connect_args = {"check_same_thread": False}
                _ensure_sqlite_dir(url)
            engine = create_engine(url, echo=False, future=True, connect_args=connect_args)
            Base.metadata.create_all(engine)
            logger.debug("Engine ready for %s", engine.url.render_as_string(hide_password=True))
            _engines[url] = engine
        return engine


@functools.lru_cache(maxsize=None)
def get_session_factory(url: str) -> sessionmaker:
    return sessionmaker(bind=get_engine(url), autoflush=False, expire_on_commit=False, future=True)


def reset_engines() -> None:
    """Dispose cached engines (tests switch DATABASE_URL between runs)."""
    with _lock:
        for engine in _engines.values():
            engine.dispose()
        _engines.clear()
    get_session_factory.cache_clear()


@contextlib.contextmanager
def session_scope(session_factory: sessionmaker):
    """Session per unit of work: commit on success, roll back on error."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
