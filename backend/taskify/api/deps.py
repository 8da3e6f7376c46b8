from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials

from taskify.utils.jwt_auth import bearer, bearer_token, resolve_user
from taskify.workspace import Workspace, guest_workspace, user_workspace

GUEST_MODE = "guest"
DEFAULT_GUEST_PROFILE = "default"


def open_workspace(
    mode: Optional[str],
    profile: Optional[str],
    token: Optional[str],
    x_user_id: Optional[str],
) -> Workspace:
    """Guest mode picks the profile's local storage; anything else needs a user."""
    if (mode or "").strip().lower() == GUEST_MODE:
        try:
            return guest_workspace(profile or DEFAULT_GUEST_PROFILE)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid guest profile")
    return user_workspace(resolve_user(token, x_user_id))


def get_workspace(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_taskify_mode: str | None = Header(default=None, alias="X-Taskify-Mode"),
    x_guest_profile: str | None = Header(default=None, alias="X-Guest-Profile"),
) -> Workspace:
    return open_workspace(x_taskify_mode, x_guest_profile, bearer_token(creds), x_user_id)
