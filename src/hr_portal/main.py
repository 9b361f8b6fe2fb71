from __future__ import annotations

import importlib
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .app_logger import get_logger, setup_logging
from .common.web import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_admin, list_tables
from .database.connection import DBConfig

from .attendance.controller import register as register_attendance
from .employees.controller import register as register_employees
from .leaves.controller import register as register_leaves
from .tasks.controller import register as register_tasks

logger = get_logger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    When ``container`` is given (tests, scripts) no database is touched at
    startup; otherwise the MySQL-backed container is built from settings.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", None))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = getattr(settings, "DB_CONFIG")

    if container is None:
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            admin_id = ensure_admin(db_config)
            logger.info("bootstrap admin ready (employee_id=%s)", admin_id)

        container = build_container(db_config=db_config)

    register_error_handlers(app)
    register_employees(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_tasks(app, container)

    return app
