from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from config import get_settings_module

from .container import Container, build_container
from .customers.controller import register as register_customers
from .database.bootstrap import apply_schema, list_tables
from .desktop.controller import register as register_desktop
from .health.controller import register as register_health
from .items.controller import register as register_items
from .lookups.controller import register as register_lookups
from .projects.controller import register as register_projects
from .realtime.controller import register as register_realtime
from .settings import AppSettings
from .timetracking.controller import register as register_time_tracking
from .users.controller import register as register_users
from .web.errors import register_error_handlers
from .web.json_provider import WorktrackJSONProvider

log = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def load_settings(settings_module: Optional[str] = None) -> AppSettings:
    load_dotenv(override=False)
    return AppSettings.from_module(importlib.import_module(settings_module or get_settings_module()))


def configure_logging(settings: AppSettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings_module: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    settings = container.settings if container is not None else load_settings(settings_module)
    configure_logging(settings)

    app = Flask(__name__)
    app.json = WorktrackJSONProvider(app)
    app.secret_key = settings.secret_key
    app.config["DEBUG"] = settings.debug
    app.config["TESTING"] = settings.testing
    CORS(app, origins=list(settings.cors_origins))

    db = settings.db
    log.info("settings=%s db=%s@%s:%s/%s", settings_module or get_settings_module(), db.user, db.host, db.port, db.database)

    if settings.auto_init_db and container is None:
        apply_schema(db, schema_path=SCHEMA_PATH)
        log.info("Schema ready (tables=%d)", len(list_tables(db)))

    if container is None:
        container = build_container(settings=settings)
    app.extensions["worktrack"] = container

    register_error_handlers(app)
    # Health first: its request hooks must see every request.
    register_health(app, container)
    register_realtime(app, container)
    register_users(app, container)
    register_customers(app, container)
    register_projects(app, container)
    register_items(app, container)
    register_lookups(app, container)
    register_time_tracking(app, container)
    register_desktop(app, container)

    return app


def get_container(app: Flask) -> Container:
    return app.extensions["worktrack"]
