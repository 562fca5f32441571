import os
from typing import Any, Optional

import stripe  # Stripe integration
from flask_cors import CORS
from flask_login import LoginManager
from flask_mail import Mail
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect
from jinja2 import Environment, FileSystemLoader, select_autoescape


# ─────────────────────────────────────────────────────────────
# Core singletons
# ─────────────────────────────────────────────────────────────
db = SQLAlchemy()
migrate = Migrate()
mail = Mail()
login_manager = LoginManager()
csrf = CSRFProtect()
cors = CORS()


# ─────────────────────────────────────────────────────────────
# Email templates
# ─────────────────────────────────────────────────────────────
def get_mail_env(templates_dir: Optional[str] = None) -> Environment:
    """
    Loads Jinja environment for email templates.
    Default path: tulipkids/templates/emails
    """
    if not templates_dir:
        templates_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates", "emails")

    return Environment(
        loader=FileSystemLoader(templates_dir),
        autoescape=select_autoescape(["html", "xml"]),
        keep_trailing_newline=True,
    )


# ─────────────────────────────────────────────────────────────
# Stripe initialization
# ─────────────────────────────────────────────────────────────
def _guess_stripe_mode(api_key: Optional[str]) -> str:
    if not api_key:
        return "disabled"
    if api_key.startswith(("sk_live_", "rk_live_")):
        return "live"
    if api_key.startswith(("sk_test_", "rk_test_")):
        return "test"
    return "unknown"


def init_stripe(app: Any) -> None:
    api_key = app.config.get("STRIPE_SECRET_KEY") or ""

    if not api_key:
        app.logger.warning("Stripe NOT initialized: missing STRIPE_SECRET_KEY (demo mode=%s)", app.config.get("DEMO_MODE"))
        app.extensions["stripe_mode"] = "disabled"
        return

    stripe.api_key = api_key
    stripe.max_network_retries = 0
    mode = _guess_stripe_mode(api_key)
    app.extensions["stripe_mode"] = mode
    app.logger.info("Stripe initialized (%s mode)", mode)


def log_mail_config(app: Any) -> None:
    """Startup summary of the SMTP account without leaking credentials."""
    app.logger.info(
        "Email configuration: user=%s password=%s from=%s to=%s",
        "Set (hidden)" if app.config.get("MAIL_USERNAME") else "NOT SET",
        "Set (hidden)" if app.config.get("MAIL_PASSWORD") else "NOT SET",
        app.config.get("MAIL_DEFAULT_SENDER"),
        app.config.get("VOLUNTEER_EMAIL_TO"),
    )


__all__ = [
    "db",
    "migrate",
    "mail",
    "login_manager",
    "csrf",
    "cors",
    "get_mail_env",
    "init_stripe",
    "log_mail_config",
]
