from __future__ import annotations

import atexit
import importlib
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import requests
from dotenv import load_dotenv
from flask import Flask

from .activity.controller import register as register_activity
from .analytics.controller import register as register_analytics
from .config import get_settings_module
from .container import Container, build_container
from .offdays.controller import register as register_off_days
from .production.controller import register as register_production
from .storage.backend import KeyValueBackend
from .sync.controller import register as register_sync
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_HANDLER_MARK = "_production_tracker_handler"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # create_app may run more than once per process (tests); replace our handlers only
    for handler in [h for h in root.handlers if getattr(h, _HANDLER_MARK, False)]:
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt="%(asctime)s %(levelname)s %(name)s %(message)s")
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(path, maxBytes=2 * 1024 * 1024, backupCount=5))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        root.addHandler(handler)


def load_settings(settings_module: Optional[str] = None):
    load_dotenv(override=False)
    return importlib.import_module(settings_module or get_settings_module())


def create_app(
    settings_module: Optional[str] = None,
    *,
    backend: Optional[KeyValueBackend] = None,
    http_session: Optional[requests.Session] = None,
) -> Flask:
    settings = load_settings(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    container: Container = build_container(settings, backend=backend, http_session=http_session)
    app.extensions["production_tracker"] = container
    atexit.register(container.close)

    logger.info(
        "Store ready (settings=%s, remote=%s)",
        settings.__name__,
        "enabled" if container.storage.remote_enabled() else "disabled",
    )
    if bool(getattr(settings, "SYNC_ON_STARTUP", False)) and container.storage.remote_enabled():
        try:
            container.storage.sync_with_remote()
        except Exception:
            # Startup continues on cached data; the failure is already logged by the store.
            logger.warning("Startup sync failed, serving cached data")

    register_users(app, container)
    register_production(app, container)
    register_off_days(app, container)
    register_activity(app, container)
    register_analytics(app, container)
    register_sync(app, container)

    return app
