from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, status

from taskify import config
from taskify.api.deps import get_workspace, open_workspace
from taskify.models.search import SearchResponse
from taskify.search.dispatcher import SearchDispatcher
from taskify.search.engine import SearchOutcome, SearchStatus
from taskify.workspace import Workspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=SearchResponse)
async def search(
    q: str = Query(default="", max_length=200),
    ws: Workspace = Depends(get_workspace),
) -> SearchResponse:
    outcome = await ws.search_engine().execute(q)
    if outcome.status is SearchStatus.ERROR:
        # never report a failed fetch as "no matches"
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Search failed")
    return SearchResponse(**outcome.to_dict())


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials:
        return None
    return credentials.strip()


@router.websocket("/live")
async def live_search(websocket: WebSocket) -> None:
    """Search-as-you-type: each text frame is the current input value."""
    headers = websocket.headers
    try:
        ws = open_workspace(
            headers.get("x-taskify-mode"),
            headers.get("x-guest-profile"),
            _bearer(headers.get("authorization")),
            headers.get("x-user-id"),
        )
    except HTTPException as exc:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(exc.detail))
        return

    await websocket.accept()

    async def deliver(seq: int, outcome: SearchOutcome) -> None:
        await websocket.send_json({"seq": seq, **outcome.to_dict()})

    dispatcher = SearchDispatcher(ws.search_engine(), deliver, delay=config.search_debounce_seconds())
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            text = message.get("text")
            if text is None:
                await websocket.close(code=status.WS_1003_UNSUPPORTED_DATA, reason="Text frames only")
                break
            dispatcher.submit(text)
        logger.debug(
            "Live search for %s ended after %d searches (%d stale)",
            ws.owner, dispatcher.dispatched, dispatcher.dropped,
        )
    finally:
        await dispatcher.close()
