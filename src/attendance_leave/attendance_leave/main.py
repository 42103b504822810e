from __future__ import annotations

import importlib
import logging
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .approvals.authority import ApprovalPolicy
from .approvals.controller import register as register_approvals
from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .container import Container, build_container
from .core.logging import setup_logging
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .entitlements.controller import register as register_entitlements
from .holidays.controller import register as register_holidays
from .leave.controller import register as register_leave
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass ``container`` to run against pre-built services (tests use in-memory
    repositories); otherwise MySQL repositories are wired from settings.
    """

    load_dotenv(override=False)
    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    setup_logging(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")),
        json_format=bool(getattr(settings, "LOG_JSON", True)),
    )

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "Starting with settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            policy=ApprovalPolicy(
                admin_bypasses_hierarchy=bool(getattr(settings, "ADMIN_BYPASSES_HIERARCHY", True)),
                admin_backdates_any_date=bool(getattr(settings, "ADMIN_BACKDATES_ANY_DATE", True)),
            ),
            comp_off_days=Decimal(str(getattr(settings, "COMP_OFF_ACCRUAL_DAYS", "0.5"))),
        )

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_leave(app, container)
    register_entitlements(app, container)
    register_holidays(app, container)
    register_approvals(app, container)

    return app
