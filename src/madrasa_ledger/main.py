from __future__ import annotations

import importlib
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_STORE_TIMEOUT_SECONDS
from .core.exceptions import SourceUnavailable
from .courses.controller import register as register_courses
from .database.bootstrap import apply_schema, list_tables
from .ledger.controller import register as register_ledger
from .periods.controller import register as register_periods
from .reports.controller import register as register_reports
from .settings.controller import register as register_settings
from .store.controller import register as register_store
from .students.controller import register as register_students
from .teachers.controller import register as register_teachers
from .users.controller import register as register_users

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]"


def setup_logging(app: Flask, *, level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Route app.logger and the package loggers to stderr and, if set, a rotating file."""
    package_logger = logging.getLogger("madrasa_ledger")
    package_logger.setLevel(level)
    app.logger.setLevel(level)

    if not package_logger.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(stream)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=10)
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        package_logger.addHandler(file_handler)


def create_app(settings: Any = None, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    if settings is None:
        settings = importlib.import_module(get_settings_module())
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = dict(getattr(settings, "DB_CONFIG", {}) or {})

    setup_logging(
        app,
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        log_file=getattr(settings, "LOG_FILE", None),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            app.logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            store_timeout_seconds=float(getattr(settings, "STORE_TIMEOUT_SECONDS", DEFAULT_STORE_TIMEOUT_SECONDS)),
            admin_login_id=getattr(settings, "ADMIN_LOGIN_ID", None),
            admin_password_hash=getattr(settings, "ADMIN_PASSWORD_HASH", None),
        )
        try:
            container.store.load()
        except SourceUnavailable as e:
            # Requests retry the load; until then they answer 503.
            app.logger.error("Initial snapshot load failed: %s", e)

    app.extensions["madrasa_ledger"] = container
    register_error_handlers(app)

    register_store(app, container)
    register_users(app, container)
    register_students(app, container)
    register_teachers(app, container)
    register_courses(app, container)
    register_attendance(app, container)
    register_ledger(app, container)
    register_periods(app, container)
    register_settings(app, container)
    register_reports(app, container)

    app.logger.info("Madrasa ledger started (settings=%s)", getattr(settings, "__name__", type(settings).__name__))
    return app
