from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.auth import install_page_guard
from .common.errors import register_error_handlers
from .common.serialization import AppJSONProvider
from .container import build_container
from .database.bootstrap import init_db, seed_demo_data
from .extensions import db, login_manager
from .finance.controller import register as register_finance
from .pages.controller import register as register_pages
from .policies.controller import register as register_policies
from .principal.controller import register as register_principal
from .reports.controller import register as register_reports
from .schools.controller import register as register_schools
from .system.controller import register as register_system
from .teaching.controller import register as register_teaching
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["SQLALCHEMY_DATABASE_URI"] = getattr(settings, "SQLALCHEMY_DATABASE_URI")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["BACKUP_DIR"] = getattr(settings, "BACKUP_DIR", "backups")

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.json = AppJSONProvider(app)

    db.init_app(app)
    login_manager.init_app(app)

    container = build_container(backup_dir=app.config["BACKUP_DIR"])
    app.extensions["container"] = container

    @login_manager.user_loader
    def load_user(user_id: str):
        return container.auth_service.load_user(user_id)

    install_page_guard(app)
    container.metrics_service.install(app)

    register_users(app, container)
    register_schools(app, container)
    register_teaching(app, container)
    register_policies(app, container)
    register_finance(app, container)
    register_reports(app, container)
    register_principal(app, container)
    register_system(app, container)
    register_pages(app, container)
    register_error_handlers(app)

    logger.debug("settings=%s db=%s", settings_module, app.config["SQLALCHEMY_DATABASE_URI"].split("@")[-1])

    with app.app_context():
        if getattr(settings, "AUTO_INIT_DB", False):
            init_db(app.config["SQLALCHEMY_DATABASE_URI"])
        if getattr(settings, "AUTO_SEED_DB", False):
            seed_demo_data()

    return app
