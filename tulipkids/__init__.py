# tulipkids/__init__.py
# Tulip Kids Foundation: Flask app factory
# - .env is read once and never overrides real env vars
# - JSON errors on API paths, HTML everywhere else
# - every log line and response carries the request id

from __future__ import annotations

import logging
import os
import time
from importlib import import_module
from typing import Any, Optional, Type, Union
from uuid import uuid4

import sentry_sdk
from dotenv import load_dotenv
from flask import Flask, g, redirect, request, url_for
from sentry_sdk.integrations.flask import FlaskIntegration
from werkzeug.exceptions import HTTPException, InternalServerError

load_dotenv(override=False)

from tulipkids.config import get_config  # noqa: E402
from tulipkids.extensions import cors, csrf, db, init_stripe, log_mail_config, login_manager, mail, migrate  # noqa: E402
from tulipkids.helpers.http import current_request_id, json_error, wants_json  # noqa: E402

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s rid=%(request_id)s | %(message)s"

# (module, url prefix); each module exposes ``bp``
BLUEPRINTS = (
    ("tulipkids.blueprints.donate", None),
    ("tulipkids.blueprints.mail_relay", None),
    ("tulipkids.admin.routes", "/admin"),
)


class RequestIdLogFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.request_id = current_request_id()
        return True


def _configure_logging(app: Flask) -> None:
    root = logging.getLogger()
    if not any(getattr(h, "_tulipkids", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler._tulipkids = True  # type: ignore[attr-defined]
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestIdLogFilter())
        root.addHandler(handler)
    root.setLevel(str(app.config.get("LOG_LEVEL") or "INFO").upper())
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def _init_sentry(app: Flask) -> None:
    dsn = (os.getenv("SENTRY_DSN") or "").strip()
    if not dsn:
        return
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration()],
        environment=app.config.get("ENV"),
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE") or 0),
        send_default_pii=False,
    )
    app.logger.info("Sentry enabled")


def _init_cors(app: Flask) -> None:
    # only the mail relay is called cross-origin (static volunteer page)
    relay = {"origins": app.config.get("CORS_ORIGINS") or []}
    cors.init_app(
        app,
        resources={r"/send-volunteer-application": relay, r"/test": relay},
        supports_credentials=True,
        methods=["GET", "POST", "OPTIONS"],
        expose_headers=["X-Request-ID"],
    )


def _init_login(app: Flask) -> None:
    from tulipkids.models import User

    login_manager.init_app(app)
    login_manager.login_view = "admin.login"
    login_manager.login_message_category = "warning"

    @login_manager.user_loader
    def load_user(uid: str):
        return db.session.get(User, int(uid)) if uid.isdigit() else None


def _create_sqlite_tables(app: Flask) -> None:
    uri = str(app.config.get("SQLALCHEMY_DATABASE_URI") or "")
    if uri.startswith("sqlite") and app.config.get("AUTO_CREATE_SQLITE", True):
        with app.app_context():
            db.create_all()


def _register_hooks(app: Flask) -> None:
    @app.before_request
    def _start_request():
        g.request_id = request.headers.get("X-Request-ID") or uuid4().hex
        g.started = time.perf_counter()

    @app.after_request
    def _stamp_response(resp):
        resp.headers["X-Request-ID"] = current_request_id()
        if "started" in g:
            resp.headers["X-Response-Time-ms"] = str(int((time.perf_counter() - g.started) * 1000))
        return resp

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        if wants_json():
            return json_error(err.description or err.name, err.code or 500)
        return err

    @app.errorhandler(Exception)
    def _unhandled(err: Exception):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        if wants_json():
            return json_error("Internal Server Error", 500)
        return InternalServerError()


def _register_routes(app: Flask) -> None:
    for dotted, prefix in BLUEPRINTS:
        app.register_blueprint(import_module(dotted).bp, url_prefix=prefix)

    @app.get("/")
    def index():
        return redirect(url_for("donate.donate_page"))

    @app.get("/healthz")
    def healthz():
        return {
            "status": "ok",
            "org": app.config.get("ORG_NAME"),
            "env": app.config.get("ENV"),
            "stripe": app.extensions.get("stripe_mode", "disabled"),
            "request_id": current_request_id(),
        }


def create_app(config: Optional[Union[str, Type[Any]]] = None) -> Flask:
    """Build the app from a config class or name (``development``, ``testing``, ``production``)."""
    app = Flask(__name__)

    cfg = config if isinstance(config, type) else get_config(config)
    app.config.from_object(cfg)
    cfg.init_app(app)
    app.url_map.strict_slashes = False
    app.json.sort_keys = False

    _configure_logging(app)
    _init_sentry(app)
    _init_cors(app)

    csrf.init_app(app)
    db.init_app(app)
    migrate.init_app(app, db, compare_type=True, render_as_batch=True)
    mail.init_app(app)
    _init_login(app)
    _create_sqlite_tables(app)
    init_stripe(app)
    log_mail_config(app)

    _register_hooks(app)
    _register_routes(app)

    from tulipkids.cli import register_cli

    register_cli(app)
    app.logger.info("Tulip Kids app ready (env=%s)", app.config.get("ENV"))
    return app
