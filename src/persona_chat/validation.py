"""Request body parsing that returns a tagged result instead of raising.

Each ``parse_*`` function takes the decoded request body (any JSON value) and
returns either ``Valid(value)`` holding a typed, trimmed request struct, or
``Invalid(error)`` with the human-readable message sent back to the client.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from .models import MessageCreate, MessageUpdate, PersonaCreate
from .store import has_document_shape

T = TypeVar("T")


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    error: str


Result = Union[Valid[T], Invalid]


def _as_object(body: Any) -> Dict[str, Any]:
    return body if isinstance(body, dict) else {}


def _clean_text(value: Any) -> Optional[str]:
    """Trimmed string, or None if ``value`` is not a non-blank string."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def parse_persona_create(body: Any) -> Result[PersonaCreate]:
    name = _clean_text(_as_object(body).get("name"))
    if name is None:
        return Invalid("Invalid name")
    return Valid(PersonaCreate(name=name))


def parse_message_create(body: Any) -> Result[MessageCreate]:
    data = _as_object(body)
    sender_id = data.get("senderId")
    text = _clean_text(data.get("text"))
    if not isinstance(sender_id, str) or not sender_id or text is None:
        return Invalid("Invalid senderId or text")
    return Valid(MessageCreate(sender_id=sender_id, text=text))


def parse_message_update(body: Any) -> Result[MessageUpdate]:
    text = _clean_text(_as_object(body).get("text"))
    if text is None:
        return Invalid("Invalid text")
    return Valid(MessageUpdate(text=text))


def parse_document(raw: Union[bytes, str]) -> Result[Dict[str, Any]]:
    """Decode an uploaded export file."""
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, ValueError):
        return Invalid("Invalid JSON")
    if not has_document_shape(data):
        return Invalid("Invalid data format")
    return Valid(data)
