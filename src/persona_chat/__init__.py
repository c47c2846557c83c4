"""Single-room persona messaging demo: JSON-file REST backend plus a static UI.

The package provides a FastAPI application factory named ``create_app``
inside ``persona_chat/server.py``.

Typical usage
-------------
from persona_chat import create_app
app = create_app()

or, from the provided launcher:

python scripts/run_server.py --host 127.0.0.1 --port 3001
"""

from __future__ import annotations

from .errors import ChatError, NotFoundError, StorageError, ValidationError
from .server import create_app
from .store import DocumentStore, JsonFileStore, MemoryStore

__all__ = [
    "create_app",
    "ChatError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    "DocumentStore",
    "JsonFileStore",
    "MemoryStore",
    "__version__",
    "get_version",
]

__version__ = "0.1.0"


def get_version() -> str:
    """Return the package version."""
    return __version__
