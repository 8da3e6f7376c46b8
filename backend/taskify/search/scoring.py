from __future__ import annotations

import re
from typing import Optional

EXACT_TITLE = 100
TITLE_PREFIX = 80
TITLE_SUBSTRING = 60
BODY_SUBSTRING = 30
TITLE_WORD = 20
BODY_WORD = 10


def score_relevance(query: str, title: Optional[str], body: Optional[str]) -> int:
    """Score how well `title`/`body` match `query`; 0 means no textual relation.

    The title tiers (exact, prefix, substring) are exclusive; the body
    substring and the two whole-word bonuses are added on top. Matching is
    case-insensitive. `query` must be non-empty.
    """
    term = query.lower()
    title_lower = (title or "").lower()
    body_lower = (body or "").lower()

    score = 0
    if title_lower == term:
        score += EXACT_TITLE
    elif title_lower.startswith(term):
        score += TITLE_PREFIX
    elif term in title_lower:
        score += TITLE_SUBSTRING

    if term in body_lower:
        score += BODY_SUBSTRING

    word = re.compile(r"\b" + re.escape(term) + r"\b", re.IGNORECASE)
    if word.search(title or ""):
        score += TITLE_WORD
    if word.search(body or ""):
        score += BODY_WORD

    return score
