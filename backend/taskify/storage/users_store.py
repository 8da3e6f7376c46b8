from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from taskify.storage.db import UserRow, session_scope
from taskify.storage.errors import DuplicateRecord, StoreError
from taskify.storage.records import utc_now_iso


@dataclass(frozen=True)
class UserRecord:
    user_id: str
    hashed_password: str
    created_at: str


class UsersStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get(self, user_id: str) -> Optional[UserRecord]:
        try:
            with session_scope(self.session_factory) as session:
                row = session.get(UserRow, user_id)
                if row is None:
                    return None
                return UserRecord(
                    user_id=row.user_id,
                    hashed_password=row.hashed_password,
                    created_at=row.created_at,
                )
        except SQLAlchemyError as exc:
            raise StoreError("User store unavailable") from exc

    def create(self, user_id: str, hashed_password: str) -> UserRecord:
        rec = UserRecord(user_id=user_id, hashed_password=hashed_password, created_at=utc_now_iso())
        try:
            with session_scope(self.session_factory) as session:
                session.add(UserRow(**rec.__dict__))
        except IntegrityError as exc:
            raise DuplicateRecord("User exists") from exc
        except SQLAlchemyError as exc:
            raise StoreError("User store unavailable") from exc
        return rec
