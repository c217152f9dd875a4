# backend/tillbook/__init__.py
import logging

from flask import Flask

from .config import Config
from .extensions import db, migrate


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    logging.getLogger("tillbook").setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # One store and one session registry per app
    from .services.catalog_store import CatalogStore
    from .services.session_service import SessionRegistry

    store = CatalogStore()
    idle_minutes = app.config.get("SESSION_IDLE_MINUTES")
    app.extensions["tillbook"] = {
        "store": store,
        "sessions": SessionRegistry(store, idle_timeout=idle_minutes * 60 if idle_minutes else None),
    }

    # Register blueprints
    from .routes.system import system_bp
    from .routes.catalog import catalog_bp
    from .routes.pos import pos_bp
    from .routes.held import held_bp
    from .routes.returns import returns_bp
    from .routes.expenses import expenses_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(pos_bp)
    app.register_blueprint(held_bp)
    app.register_blueprint(returns_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(reports_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
