"""Script to launch the persona chat server."""

from __future__ import annotations

import argparse
import logging
import os
import sys

import uvicorn

# Ensure src/ is on sys.path (so imports work when run directly)
SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from persona_chat.config import load_config  # noqa: E402
from persona_chat.server import create_app  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the persona chat server.")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: $PERSONA_CHAT_CONFIG or ./config.yaml)",
    )
    parser.add_argument("--host", type=str, default=None, help="Host to bind (default: from config)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (default: from config)")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: from config)")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (default: off)",
    )
    args = parser.parse_args()

    cfg = load_config(args.config)
    server_cfg = cfg.get("server", {})
    level = (args.log_level or cfg.get("logging", {}).get("level") or "INFO").upper()

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger("persona_chat.run")

    host = args.host or os.environ.get("HOST") or server_cfg.get("host", "127.0.0.1")
    port = args.port or int(os.environ.get("PORT") or server_cfg.get("port", 3001))

    logger.info("Backend server running on http://%s:%s", host, port)

    if args.reload:
        # Reload needs an import string; the factory re-reads config from the environment.
        if args.config:
            os.environ["PERSONA_CHAT_CONFIG"] = args.config
        uvicorn.run(
            "persona_chat.server:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_level=level.lower(),
        )
        return

    uvicorn.run(
        create_app(args.config),
        host=host,
        port=port,
        log_level=level.lower(),
    )


if __name__ == "__main__":
    main()
