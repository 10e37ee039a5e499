from __future__ import annotations

import atexit
import contextlib
import logging
import signal
import threading
from typing import Any

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from app.blueprints.api.health import health_api
from app.blueprints.api.misting import misting_api
from app.blueprints.api.notifications import notifications_api
from app.blueprints.api.pump import pump_api
from app.blueprints.api.records import records_api
from app.blueprints.api.reports import reports_api
from app.blueprints.api.sensors import sensors_api
from app.blueprints.api.stream import stream_api
from app.blueprints.api.users import users_api
from app.blueprints.auth.routes import auth_bp
from app.config import AppConfig, load_config, setup_logging
from app.extensions import init_extensions, socketio

API_V1 = "/api/v1"

logger = logging.getLogger(__name__)


def create_app(config_overrides: dict[str, Any] | None = None, *, bootstrap_runtime: bool = False) -> Flask:
    """
    Build the AgriCool Flask app.

    ``config_overrides`` keys are matched case-insensitively against
    :class:`AppConfig` attributes (tests pass ``database_path`` etc.).
    ``bootstrap_runtime`` installs SIGINT/SIGTERM handlers and is only set
    by ``run_server``.
    """
    config = load_config()
    for key, value in (config_overrides or {}).items():
        setattr(config, key.lower(), value)

    # Logging first so MQTT connect and table creation show up in agricool.log
    setup_logging(debug=config.DEBUG, log_level=config.log_level, log_dir=config.log_dir)

    flask_app = Flask(__name__)
    flask_app.config.update(config.as_flask_config())
    flask_app.config.update(
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_SECURE=config.environment == "production",
    )

    # EmitterService needs the initialised Socket.IO server
    init_extensions(flask_app, config.socketio_cors_origins)

    from app.services.container import ServiceContainer

    container = ServiceContainer.build(config, socketio=socketio)
    flask_app.config["CONTAINER"] = container
    flask_app.teardown_appcontext(container.database.close_db)

    _install_shutdown_hooks(container, with_signals=bootstrap_runtime)
    _register_error_handlers(flask_app)
    _register_blueprints(flask_app)

    from app.socketio import register_handlers

    register_handlers()

    flask_app.wsgi_app = _unversioned_api_alias(flask_app.wsgi_app)  # type: ignore[assignment]

    logger.info("AgriCool application initialized (env=%s, mqtt=%s)", config.environment, config.enable_mqtt)
    return flask_app


def _register_blueprints(flask_app: Flask) -> None:
    flask_app.register_blueprint(auth_bp, url_prefix="/auth")

    for blueprint, prefix in (
        (sensors_api, "/sensors"),
        (misting_api, "/misting"),
        (pump_api, "/pump"),
        (notifications_api, "/notifications"),
        (records_api, ""),
        (reports_api, "/reports"),
        (stream_api, "/stream"),
        (users_api, "/users"),
        (health_api, "/health"),
    ):
        flask_app.register_blueprint(blueprint, url_prefix=f"{API_V1}{prefix}")

    logger.debug("Registered blueprints: %s", ", ".join(flask_app.blueprints))


def _register_error_handlers(flask_app: Flask) -> None:
    """JSON envelopes for anything that escapes a route under /api/ or /auth/."""
    from app.domain.exceptions import AgriCoolError
    from app.utils.http import agricool_error_response, error_response, safe_error

    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        if not request.path.startswith(("/api/", "/auth/")):
            if isinstance(exc, HTTPException):
                return exc
            raise exc

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(exc.description or "Request failed", status)

        if isinstance(exc, AgriCoolError):
            return agricool_error_response(exc, type(exc).__name__)

        return safe_error(exc, 500, context="unhandled")

    @flask_app.errorhandler(413)
    def _handle_too_large(_exc):
        return error_response("Request payload too large", 413)


def _install_shutdown_hooks(container, *, with_signals: bool) -> None:
    """Stop the MQTT loop, SSE streams and database exactly once on exit."""
    lock = threading.Lock()
    done = False

    def shutdown(reason: str) -> None:
        nonlocal done
        with lock:
            if done or container._shutdown_complete:
                return
            done = True
        logger.info("Graceful shutdown initiated (%s)", reason)
        try:
            container.shutdown()
        except Exception as exc:
            logger.warning("Error during graceful shutdown: %s", exc)

    def on_signal(signum: int, _frame: object) -> None:
        name = signal.Signals(signum).name
        logger.info("Received %s, shutting down", name)
        shutdown(name)
        raise SystemExit(0)

    atexit.register(shutdown, "atexit")

    if with_signals:
        for sig in (signal.SIGINT, signal.SIGTERM):
            # signal.signal only works in the main thread
            with contextlib.suppress(OSError, ValueError):
                signal.signal(sig, on_signal)


def _unversioned_api_alias(wsgi_app):
    """Serve ``/api/<path>`` as ``/api/v1/<path>`` without a redirect."""

    def middleware(environ, start_response):
        path = environ.get("PATH_INFO", "")
        if path == "/api":
            environ["PATH_INFO"] = API_V1
        elif path.startswith("/api/") and path != API_V1 and not path.startswith(f"{API_V1}/"):
            environ["PATH_INFO"] = API_V1 + path[len("/api"):]
        return wsgi_app(environ, start_response)

    return middleware


__all__ = ["AppConfig", "create_app", "socketio"]
