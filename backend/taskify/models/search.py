from typing import Any, Literal

from pydantic import BaseModel


class SearchHitOut(BaseModel):
    kind: Literal["task", "note"]
    score: int
    record: dict[str, Any]


class SearchResponse(BaseModel):
    query: str
    status: Literal["ok", "empty"]
    results: list[SearchHitOut]
