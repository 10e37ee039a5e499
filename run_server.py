"""Entry point for the AgriCool backend server."""

from __future__ import annotations

import logging
import os
import sys

from app import create_app, socketio

logger = logging.getLogger(__name__)


def main() -> int:
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")

    app = create_app(bootstrap_runtime=True)

    host = os.getenv("AGRICOOL_HOST", "0.0.0.0")
    port = int(os.getenv("AGRICOOL_PORT", os.getenv("FLASK_RUN_PORT", "8000")))

    logger.info("Server starting on http://%s:%s", host, port)
    logger.info("SocketIO async_mode: %s", socketio.async_mode)

    try:
        # socketio.run() instead of app.run() for WebSocket/polling support
        socketio.run(
            app,
            host=host,
            port=port,
            debug=False,
            use_reloader=False,
            allow_unsafe_werkzeug=True,
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Server error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
