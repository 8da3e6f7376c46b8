from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from taskify import config
from taskify.models.auth import LoginRequest, RegisterRequest, TokenResponse
from taskify.storage.db import get_session_factory
from taskify.storage.errors import DuplicateRecord
from taskify.storage.users_store import UsersStore
from taskify.utils.auth_hash import hash_password, verify_password
from taskify.utils.jwt_auth import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _users() -> UsersStore:
    return UsersStore(get_session_factory(config.database_url()))


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(req: RegisterRequest):
    users = _users()
    if users.get(req.user_id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User exists")

    try:
        users.create(req.user_id, hash_password(req.password))
    except DuplicateRecord:
        # lost a race with a concurrent registration
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User exists")
    logger.info("Registered user %s", req.user_id)
    return {"user_id": req.user_id}


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest):
    rec = _users().get(req.user_id)
    if rec is None or not verify_password(req.password, rec.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return TokenResponse(access_token=create_access_token(subject=req.user_id))
