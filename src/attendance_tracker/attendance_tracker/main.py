from __future__ import annotations

import importlib
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_socketio import SocketIO

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import build_container
from .core.enums import StoreBackend
from .database.bootstrap import apply_schema, list_tables
from .realtime.controller import register as register_realtime
from .realtime.socketio_transport import SocketIOTransport

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def create_app(settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    store_backend = StoreBackend(getattr(settings, "STORE_BACKEND", StoreBackend.MYSQL.value))
    db_config = getattr(settings, "DB_CONFIG", None)

    logger.info("settings=%s store=%s", settings_module, store_backend.value)

    if store_backend == StoreBackend.MYSQL and bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        store_backend=store_backend,
        timezone=getattr(settings, "TIMEZONE", "UTC"),
    )

    socketio = SocketIO(
        app,
        async_mode="threading",
        cors_allowed_origins=getattr(settings, "SOCKETIO_CORS_ORIGINS", None),
    )
    transport = SocketIOTransport(socketio)
    async_dispatch = bool(getattr(settings, "REALTIME_ASYNC_DISPATCH", True))
    container.notifier.bind_transport(transport, dispatcher=transport.dispatch if async_dispatch else None)

    register_attendance(app, container)
    register_realtime(socketio, container)

    app.extensions["attendance_container"] = container
    return app


def run() -> None:
    app = create_app()
    socketio: SocketIO = app.extensions["socketio"]
    socketio.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        debug=app.config["DEBUG"],
        allow_unsafe_werkzeug=True,
    )


if __name__ == "__main__":
    run()
