from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, g

from config import get_settings_module

from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .core.enums import Role
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .metrics.calculator import format_gpa, format_percentage
from .sessions.holder import SessionHolder
from .sessions.store import FlaskSessionStore
from .students.controller import register as register_students
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    """Application root.

    ``container`` lets callers (tests) supply already-wired services; when it is
    omitted the MySQL-backed container is built from ``DB_CONFIG``.
    """
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../templates")

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ALLOW_ADMIN_REGISTRATION"] = bool(getattr(settings, "ALLOW_ADMIN_REGISTRATION", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            ensure_demo_users(db_config)
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            attendance_aggregation=getattr(settings, "ATTENDANCE_AGGREGATION", "pooled"),
        )

    app.extensions["student_portal"] = container

    @app.before_request
    def restore_session():
        holder = SessionHolder(FlaskSessionStore(), container.credential_authority)
        holder.restore()
        g.session_holder = holder

    @app.context_processor
    def inject_current_user():
        holder = g.get("session_holder")
        return {
            "current_user": holder.current if holder is not None else None,
            "Role": Role,
            "format_gpa": format_gpa,
            "format_percentage": format_percentage,
        }

    register_users(app, container)
    register_students(app, container)

    return app
