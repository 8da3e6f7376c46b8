from __future__ import annotations

import contextlib
import logging
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from taskify.storage.db import LIKE_ESCAPE, TaskRow, contains_pattern, session_scope
from taskify.storage.errors import StoreError
from taskify.storage.records import (
    Task,
    TaskStats,
    clean_task_changes,
    next_timestamp,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


def _to_task(row: TaskRow) -> Task:
    return Task(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        description=row.description,
        status=row.status,
        category=row.category,
        due_date=row.due_date,
        priority=row.priority,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class TasksStore:
    """Tasks of one user in the row-store. Every query is owner-scoped."""

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
            raise StoreError("Task store unavailable") from exc

    def _owned(self):
        return select(TaskRow).where(TaskRow.user_id == self.user_id)

    def _get_row(self, session: Session, task_id: str) -> Optional[TaskRow]:
        # no leak: a foreign task looks exactly like a missing one
        return session.scalars(self._owned().where(TaskRow.id == str(task_id))).first()

    def list_tasks(self, status: Optional[str] = None, category: Optional[str] = None) -> list[Task]:
        stmt = self._owned()
        if status is not None:
            stmt = stmt.where(TaskRow.status == status)
        if category is not None:
            stmt = stmt.where(TaskRow.category == category)
        stmt = stmt.order_by(TaskRow.created_at.desc(), TaskRow.id)
        with self._session() as session:
            return [_to_task(row) for row in session.scalars(stmt)]

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._session() as session:
            row = self._get_row(session, task_id)
            return _to_task(row) if row is not None else None

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
        row = TaskRow(user_id=self.user_id, created_at=now, updated_at=now, **fields)
        with self._session() as session:
            session.add(row)
            session.flush()
            task = _to_task(row)
        logger.info("Task %s created for %s", task.id, self.user_id)
        return task

    def update_task(self, task_id: str, changes: dict[str, Any]) -> Optional[Task]:
        fields = clean_task_changes(changes)
        with self._session() as session:
            row = self._get_row(session, task_id)
            if row is None:
                return None
            for key, value in fields.items():
                setattr(row, key, value)
            row.updated_at = next_timestamp(row.updated_at)
            session.flush()
            return _to_task(row)

    def delete_task(self, task_id: str) -> bool:
        with self._session() as session:
            row = self._get_row(session, task_id)
            if row is None:
                return False
            session.delete(row)
        logger.info("Task %s deleted for %s", task_id, self.user_id)
        return True

    def search_tasks(self, term: str) -> list[Task]:
        """Case-insensitive literal substring match over title and description."""
        pattern = contains_pattern(term)
        stmt = (
            self._owned()
            .where(or_(
                TaskRow.title.ilike(pattern, escape=LIKE_ESCAPE),
                TaskRow.description.ilike(pattern, escape=LIKE_ESCAPE),
            ))
            .order_by(TaskRow.created_at.desc(), TaskRow.id)
        )
        with self._session() as session:
            return [_to_task(row) for row in session.scalars(stmt)]

    def task_stats(self) -> TaskStats:
        stmt = (
            select(TaskRow.status, func.count())
            .where(TaskRow.user_id == self.user_id)
            .group_by(TaskRow.status)
        )
        with self._session() as session:
            counts = {status: int(n) for status, n in session.execute(stmt).all()}
        return TaskStats(
            total=sum(counts.values()),
            pending=counts.get("pending", 0),
            in_progress=counts.get("in-progress", 0),
            completed=counts.get("completed", 0),
        )
