"""Pure helpers for the derived chat view.

``docs/app.js`` mirrors these functions on the client; the server uses them for
``GET /messages`` ordering and the ``?q=`` search parameter.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

Row = Dict[str, Any]


def _timestamp(message: Row) -> float:
    ts = message.get("timestamp")
    # bool is an int subclass but never a real timestamp
    if isinstance(ts, (int, float)) and not isinstance(ts, bool):
        return ts
    return 0


def sort_by_timestamp(messages: Sequence[Row]) -> List[Row]:
    """Ascending by timestamp; ``sorted`` is stable so ties keep stored order.

    Missing or non-numeric timestamps (possible after an import) sort as 0.
    """
    return sorted(messages, key=_timestamp)


def filter_messages(messages: Sequence[Row], query: Optional[str]) -> List[Row]:
    """Messages whose text contains ``query`` (case-insensitive), order preserved."""
    if not query:
        return list(messages)
    needle = query.casefold()
    return [m for m in messages if needle in str(m.get("text", "")).casefold()]


def default_sender(personas: Sequence[Row], current: Optional[str] = None) -> Optional[str]:
    """Keep the current sender if it still exists, else fall back to the first persona."""
    if current and any(p.get("id") == current for p in personas):
        return current
    return personas[0]["id"] if personas else None
