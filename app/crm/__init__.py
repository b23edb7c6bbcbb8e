import logging

from dotenv import load_dotenv
from flask import Flask, g, jsonify
from werkzeug.exceptions import HTTPException

from app.crm.auth import bp as auth_bp, load_current_user
from app.crm.config import load_config
from app.crm.db import init_store
from app.crm.modules.customers.api import bp as customers_bp
from app.crm.modules.dashboard.api import bp as dashboard_bp
from app.crm.modules.excel.api import bp as excel_bp
from app.crm.modules.tasks.api import bp as tasks_bp
from app.crm.modules.users.api import bp as users_bp
from app.crm.routes import bp as routes_bp
from app.crm.storage import MemStorage


def create_app(store: MemStorage | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")
        if str(app.config["JWT_SECRET"]) in ("", "crm_secret_key"):
            raise RuntimeError("JWT_SECRET must be set to a strong value in production (not default).")

    # One store per process, owned by the app; data lives until the process exits.
    store = init_store(app, store)
    app.logger.info("Store ready (users=%s)", len(store.list_users()))

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(users_bp, url_prefix="/api")
    app.register_blueprint(excel_bp, url_prefix="/api")
    app.register_blueprint(customers_bp, url_prefix="/api")
    app.register_blueprint(tasks_bp, url_prefix="/api")
    app.register_blueprint(dashboard_bp, url_prefix="/api")

    app.before_request(load_current_user)

    @app.errorhandler(HTTPException)
    def _err_http(e: HTTPException):
        if e.code == 403:
            app.logger.warning("Forbidden: %s request_id=%s", e.description, getattr(g, "request_id", None))
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        rid = getattr(g, "request_id", None)
        app.logger.exception("Unhandled 500 (request_id=%s)", rid)
        return jsonify({"message": "Internal server error"}), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
