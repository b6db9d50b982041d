from __future__ import annotations

import re
from typing import Iterable, List, Optional

_TOKEN_RE = re.compile(r"[\w']+")


def normalize_fts_query(raw: Optional[str]) -> Optional[str]:
    """Turn free text into an FTS5 MATCH expression of quoted tokens.

    Returns None for empty input and "" when nothing searchable remains.
    """
    if raw is None:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None
    tokens: List[str] = _TOKEN_RE.findall(cleaned)
    if not tokens:
        return ""
    return " ".join(f'"{token}"' for token in tokens)


def contains_text(query: Optional[str], *fields: Optional[str]) -> bool:
    """Case-insensitive substring match over any of the given fields."""
    if not query or not query.strip():
        return True
    needle = query.strip().lower()
    return any(needle in (field or "").lower() for field in fields)


def filter_by_text(items: Iterable[dict], query: Optional[str], *keys: str) -> List[dict]:
    return [item for item in items if contains_text(query, *(item.get(key) for key in keys))]
