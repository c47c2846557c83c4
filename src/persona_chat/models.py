"""Pydantic models for personas, messages and API payloads."""
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


# -----------------------------
# Stored entities
# -----------------------------
class Persona(BaseModel):
    id: str
    name: str


class Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    sender_id: str = Field(alias="senderId")
    text: str
    timestamp: int = Field(..., description="Milliseconds since epoch, set once at creation.")


# -----------------------------
# Request structs (already validated + trimmed)
# -----------------------------
class PersonaCreate(BaseModel):
    name: str = Field(..., min_length=1)


class MessageCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sender_id: str = Field(..., alias="senderId", min_length=1)
    text: str = Field(..., min_length=1)


class MessageUpdate(BaseModel):
    text: str = Field(..., min_length=1)


# -----------------------------
# Responses
# -----------------------------
class Ack(BaseModel):
    success: bool = True


class Health(BaseModel):
    status: str = "OK"


def dump(model: BaseModel) -> Dict[str, Any]:
    """Serialize a model the way it is stored on disk (wire aliases)."""
    return model.model_dump(by_alias=True)
