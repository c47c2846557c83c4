"""Chat operations over an injected document store."""
from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable, Dict, List, Optional

from .errors import NotFoundError, ValidationError
from .models import Ack, Message, Persona, dump
from .store import DocumentStore
from .validation import (
    Invalid,
    parse_document,
    parse_message_create,
    parse_message_update,
    parse_persona_create,
)
from .view import filter_messages, sort_by_timestamp

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())


def _unwrap(result):
    if isinstance(result, Invalid):
        raise ValidationError(result.error)
    return result.value


def _find_message(messages: List[Dict[str, Any]], message_id: str) -> int:
    for i, m in enumerate(messages):
        if m.get("id") == message_id:
            return i
    raise NotFoundError("Message not found")


class ChatService:
    """Stateless request handlers; every call loads and (if mutating) saves the whole document.

    Parameters
    ----------
    store : DocumentStore
        Backing for the document.
    clock : callable, optional
        Returns the current time in milliseconds since epoch.
    id_factory : callable, optional
        Returns a fresh identifier string (UUID4 by default).
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        clock: Optional[Clock] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.store = store
        self.clock = clock or now_ms
        self.id_factory = id_factory or new_id

    # --------- personas ----------
    def list_personas(self) -> List[Dict[str, Any]]:
        return self.store.load()["personas"]

    def create_persona(self, body: Any) -> Dict[str, Any]:
        req = _unwrap(parse_persona_create(body))
        data = self.store.load()
        persona = dump(Persona(id=self.id_factory(), name=req.name))
        data["personas"].append(persona)
        self.store.save(data)
        logger.info("Created persona %s (%s)", persona["id"], persona["name"])
        return persona

    # --------- messages ----------
    def list_messages(self, query: Optional[str] = None) -> List[Dict[str, Any]]:
        messages = sort_by_timestamp(self.store.load()["messages"])
        return filter_messages(messages, query)

    def send_message(self, body: Any) -> Dict[str, Any]:
        req = _unwrap(parse_message_create(body))
        data = self.store.load()
        if not any(p.get("id") == req.sender_id for p in data["personas"]):
            raise ValidationError("Persona not found")
        message = dump(
            Message(
                id=self.id_factory(),
                sender_id=req.sender_id,
                text=req.text,
                timestamp=self.clock(),
            )
        )
        data["messages"].append(message)
        self.store.save(data)
        logger.info("Message %s sent by %s", message["id"], req.sender_id)
        return message

    def edit_message(self, message_id: str, body: Any) -> Dict[str, Any]:
        req = _unwrap(parse_message_update(body))
        data = self.store.load()
        idx = _find_message(data["messages"], message_id)
        data["messages"][idx]["text"] = req.text
        self.store.save(data)
        logger.info("Message %s edited", message_id)
        return data["messages"][idx]

    def delete_message(self, message_id: str) -> Dict[str, Any]:
        data = self.store.load()
        idx = _find_message(data["messages"], message_id)
        del data["messages"][idx]
        self.store.save(data)
        logger.info("Message %s deleted", message_id)
        return dump(Ack())

    # --------- export / import ----------
    def export_document(self) -> Dict[str, Any]:
        return self.store.load()

    def import_document(self, raw: bytes) -> Dict[str, Any]:
        """Replace the whole document with an uploaded export. No merge."""
        document = _unwrap(parse_document(raw))
        self.store.replace(document)
        logger.info(
            "Imported document: %d persona(s), %d message(s)",
            len(document["personas"]),
            len(document["messages"]),
        )
        return dump(Ack())
