import logging
import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, g, request
from flask_cors import CORS

from app.wowbato.config import load_config
from app.wowbato.db import init_db, teardown_db_session
from app.wowbato.errors import register_error_handlers
from app.wowbato.ids import EntityIdConverter
from app.wowbato.routes import bp as routes_bp
from app.wowbato.auth import bp as user_bp, load_identity
from app.wowbato.modules.barangays.routes import bp as barangays_bp
from app.wowbato.modules.budget_categories.routes import bp as budget_categories_bp
from app.wowbato.modules.projects.routes import bp as projects_bp
from app.wowbato.modules.budget_items.routes import bp as budget_items_bp
from app.wowbato.modules.feedback.routes import bp as feedback_bp
from app.wowbato.modules.feedback_replies.routes import bp as feedback_replies_bp
from app.wowbato.modules.public_dashboard.routes import bp as dashboard_bp

API_PREFIX = "/api/v1"


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    if app.config["SESSION_MAX_AGE"] > 0:
        app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(seconds=app.config["SESSION_MAX_AGE"])
    app.json.sort_keys = False  # type: ignore[attr-defined]
    app.url_map.converters["id"] = EntityIdConverter

    logging.basicConfig(level=app.config["LOG_LEVEL"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    CORS(
        app,
        resources={f"{API_PREFIX}/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
    )

    init_db(app)

    def _dispose_engine_on_fork() -> None:
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    app.register_blueprint(routes_bp)
    app.register_blueprint(user_bp, url_prefix=f"{API_PREFIX}/user")
    app.register_blueprint(barangays_bp, url_prefix=f"{API_PREFIX}/barangay")
    app.register_blueprint(budget_categories_bp, url_prefix=f"{API_PREFIX}/budgetCategory")
    app.register_blueprint(projects_bp, url_prefix=f"{API_PREFIX}/project")
    app.register_blueprint(budget_items_bp, url_prefix=f"{API_PREFIX}/budgetItem")
    app.register_blueprint(feedback_bp, url_prefix=f"{API_PREFIX}/feedback")
    app.register_blueprint(feedback_replies_bp, url_prefix=f"{API_PREFIX}/feedbackReply")
    app.register_blueprint(dashboard_bp, url_prefix=f"{API_PREFIX}/dashboard")

    def _load_identity_wrapper():
        if request.path.startswith(("/health", "/healthz")):
            g.identity = None
            return None
        return load_identity()

    app.before_request(_load_identity_wrapper)
    app.teardown_appcontext(teardown_db_session)
    register_error_handlers(app)

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
