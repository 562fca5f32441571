"""
Admin reconciliation dashboard (HTML + JSON).

Every request builds an AdminDashboard over a record store scoped to the
signed-in admin, loads both tables, then renders or mutates. Toasts go
through flash() for the HTML views and are echoed in JSON responses.
"""

from typing import Any, Dict, List, Optional

from flask import (
    Blueprint,
    Response,
    abort,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy import func, select

from tulipkids.extensions import db, login_manager
from tulipkids.forms import LoginForm
from tulipkids.helpers.csv_export import EXPORT_KINDS
from tulipkids.helpers.http import json_error, wants_json
from tulipkids.models import DONATION_STATUSES, PAYMENT_STATUSES, User
from tulipkids.notify import FlashNotifier
from tulipkids.services.reconciliation import AdminDashboard
from tulipkids.services.record_store import AuthContext, SqlRecordStore

admin = Blueprint("admin", __name__, url_prefix="/admin")
bp = admin
admin_bp = admin
__all__ = ["bp", "admin_bp", "admin"]

TABS = ("registrations", "donations")
_OPEN_ENDPOINTS = {"admin.login"}


# ── Helpers ─────────────────────────────────────────────────────────────────
def _arg(name: str, default: str = "") -> str:
    payload = request.get_json(silent=True) if request.is_json else None
    if isinstance(payload, dict) and payload.get(name) is not None:
        return str(payload[name]).strip()
    return (request.values.get(name) or default).strip()


def _view_args() -> Dict[str, str]:
    """Current tab/search/filter state, carried across redirects."""
    tab = _arg("tab", "registrations")
    return {
        "tab": tab if tab in TABS else "registrations",
        "q": _arg("q"),
        "reg_status": _arg("reg_status", "all"),
        "don_status": _arg("don_status", "all"),
    }


def _dashboard(notifier: FlashNotifier) -> AdminDashboard:
    view = _view_args()
    dash = AdminDashboard(
        SqlRecordStore(AuthContext.from_user(current_user)),
        notifier,
        query=view["q"],
        registration_filter=view["reg_status"],
        donation_filter=view["don_status"],
    )
    dash.load()
    return dash


def _find(records: List[Any], record_id: str) -> Optional[Dict[str, Any]]:
    for r in records:
        if r.id == record_id:
            return r.to_row()
    return None


def _back_to_dashboard():
    return redirect(url_for("admin.dashboard", **_view_args()))


def _mutation_response(ok: bool, notifier: FlashNotifier, dash: AdminDashboard, record: Optional[Dict[str, Any]]):
    if not wants_json():
        return _back_to_dashboard()
    body = {
        "ok": ok,
        "record": record,
        "stats": dash.stats.as_dict(),
        "toasts": [t.as_dict() for t in notifier.toasts],
    }
    return jsonify(body), (200 if ok else 500)


# ── Guard ───────────────────────────────────────────────────────────────────
@admin.before_request
def _admin_guard():
    if request.endpoint in _OPEN_ENDPOINTS:
        return None
    if not current_user.is_authenticated:
        if wants_json():
            return json_error("Authentication required", 401)
        return login_manager.unauthorized()
    if not getattr(current_user, "is_admin", False):
        current_app.logger.warning("Non-admin %s denied %s", current_user.get_id(), request.path)
        if wants_json():
            return json_error("Admin access required", 403)
        abort(403)
    return None


# ── Auth ────────────────────────────────────────────────────────────────────
@admin.route("/login", methods=["GET", "POST"])
def login():
    if current_user.is_authenticated and getattr(current_user, "is_admin", False):
        return redirect(url_for("admin.dashboard"))

    form = LoginForm()
    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        user = db.session.execute(select(User).where(func.lower(User.email) == email)).scalar_one_or_none()
        if user and user.is_active and user.is_admin and user.check_password(form.password.data):
            login_user(user)
            current_app.logger.info("Admin login: %s", user.email)
            nxt = request.args.get("next") or ""
            # relative paths only
            if not nxt.startswith("/") or nxt.startswith("//"):
                nxt = url_for("admin.dashboard")
            return redirect(nxt)
        flash("Invalid email or password.", "danger")
    return render_template("admin/login.html", form=form)


@admin.post("/logout")
@login_required
def logout():
    logout_user()
    flash("Signed out.", "success")
    return redirect(url_for("admin.login"))


# ───────────────────────────────
# DASHBOARD
# ───────────────────────────────
@admin.route("/")
@login_required
def dashboard():
    dash = _dashboard(FlashNotifier())
    view = _view_args()
    return render_template(
        "admin/dashboard.html",
        dash=dash,
        stats=dash.stats,
        registrations=dash.filtered_registrations,
        donations=dash.filtered_donations,
        view=view,
        payment_statuses=PAYMENT_STATUSES,
        donation_statuses=DONATION_STATUSES,
    )


@admin.get("/api/dashboard")
@login_required
def dashboard_api():
    notifier = FlashNotifier()
    dash = _dashboard(notifier)
    return jsonify(
        {
            "ok": not notifier.toasts,
            "stats": dash.stats.as_dict(),
            "registrations": [r.to_row() for r in dash.filtered_registrations],
            "donations": [d.to_row() for d in dash.filtered_donations],
            "filters": _view_args(),
            "toasts": [t.as_dict() for t in notifier.toasts],
        }
    )


# ───────────────────────────────
# STATUS CORRECTION
# ───────────────────────────────
@admin.post("/registrations/<record_id>/status")
@login_required
def update_registration_status(record_id: str):
    status = _arg("status")
    if status not in PAYMENT_STATUSES:
        if wants_json():
            return json_error(f"Invalid payment status: {status or '(empty)'}", 400)
        flash("Invalid payment status.", "danger")
        return _back_to_dashboard()

    notifier = FlashNotifier()
    dash = _dashboard(notifier)
    ok = dash.update_payment_status(record_id, status)
    return _mutation_response(ok, notifier, dash, _find(dash.registrations, record_id))


@admin.post("/donations/<record_id>/status")
@login_required
def update_donation_status(record_id: str):
    status = _arg("status")
    if status not in DONATION_STATUSES:
        if wants_json():
            return json_error(f"Invalid donation status: {status or '(empty)'}", 400)
        flash("Invalid donation status.", "danger")
        return _back_to_dashboard()

    notifier = FlashNotifier()
    dash = _dashboard(notifier)
    ok = dash.update_donation_status(record_id, status)
    return _mutation_response(ok, notifier, dash, _find(dash.donations, record_id))


@admin.post("/donations/<record_id>/certificate")
@login_required
def send_certificate(record_id: str):
    notifier = FlashNotifier()
    dash = _dashboard(notifier)
    ok = dash.send_certificate(record_id)
    return _mutation_response(ok, notifier, dash, _find(dash.donations, record_id))


# ───────────────────────────────
# CSV EXPORT
# ───────────────────────────────
@admin.get("/export/<kind>")
@login_required
def export(kind: str):
    """CSV of the currently filtered registrations or donations."""
    if kind not in EXPORT_KINDS:
        abort(404)
    dash = _dashboard(FlashNotifier())
    out = dash.export_data(kind)
    current_app.logger.info("Exported %s as %s", kind, out.filename)
    return Response(
        out.content,
        content_type=out.mimetype,
        headers={"Content-Disposition": f"attachment; filename={out.filename}"},
    )
