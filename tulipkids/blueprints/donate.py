"""
Public donation pages.

  GET  /donate              form page (Stripe Elements mounts the card field)
  POST /donate              JSON or form submission: {first_name, last_name,
                            email, amount, designation, is_anonymous,
                            payment_method}
  GET  /donation-success    confirmation view
  GET  /payments/config     publishable key for the browser
"""

from __future__ import annotations

from typing import Dict
from uuid import uuid4

from flask import (
    Blueprint,
    current_app,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from flask_login import current_user

from tulipkids.extensions import csrf
from tulipkids.forms import DESIGNATIONS, PRESET_AMOUNTS, DonationForm, form_from_payload
from tulipkids.helpers.http import json_error, json_ok
from tulipkids.notify import FlashNotifier
from tulipkids.services.donation_flow import (
    IN_FLIGHT_ERROR,
    Confirmation,
    DonationInput,
    DonationSubmission,
    InFlightFlag,
)
from tulipkids.services.payments import PaymentGateway, gateway_from_config
from tulipkids.services.record_store import AuthContext, RecordStore, SqlRecordStore

bp = Blueprint("donate", __name__)

# Posted by fetch() from the donate page.
csrf.exempt(bp)

CONFIRMATION_KEY = "donation_confirmation"
DONOR_SESSION_KEY = "donor_sid"

# donor session id -> busy flag
_IN_FLIGHT: Dict[str, InFlightFlag] = {}


# ----------------------------
# Collaborators (patched in tests)
# ----------------------------
def _gateway() -> PaymentGateway:
    return gateway_from_config(current_app.config)


def _store() -> RecordStore:
    return SqlRecordStore(AuthContext.from_user(current_user))


def _donor_flag() -> InFlightFlag:
    sid = session.get(DONOR_SESSION_KEY)
    if not sid:
        sid = session[DONOR_SESSION_KEY] = uuid4().hex
    return _IN_FLIGHT.setdefault(sid, InFlightFlag())


# ----------------------------
# Routes
# ----------------------------
@bp.get("/donate")
def donate_page():
    cfg = current_app.config
    return render_template(
        "donate.html",
        form=DonationForm(),
        designations=DESIGNATIONS,
        preset_amounts=PRESET_AMOUNTS,
        publishable_key=cfg.get("STRIPE_PUBLISHABLE_KEY") or "",
        demo_mode=getattr(_gateway(), "demo", False),
    )


@bp.post("/donate")
def submit_donation():
    payload = request.get_json(silent=True) if request.is_json else request.form
    if not isinstance(payload, dict):
        return json_error("Request body must be a JSON object", 400)
    if not payload:
        return json_error("Request body is empty", 400)

    form = form_from_payload(DonationForm, payload)
    if not form.validate():
        return json_error("Please correct the highlighted fields", 400, errors=form.errors)

    notifier = FlashNotifier()
    flag = _donor_flag()
    try:
        flow = DonationSubmission(
            _gateway(),
            _store(),
            notifier,
            org_name=current_app.config.get("ORG_NAME") or "Tulip Kids Foundation",
            flag=flag,
        )
        result = flow.submit(
            DonationInput.from_form(form),
            payload.get("payment_method") or payload.get("paymentMethod"),
        )
    finally:
        if not flag.active:
            _IN_FLIGHT.pop(session.get(DONOR_SESSION_KEY), None)
    toasts = [t.as_dict() for t in notifier.toasts]

    if result.error == IN_FLIGHT_ERROR:
        return json_error(IN_FLIGHT_ERROR, 409, toasts=toasts)
    if not result.ok:
        return json_error(result.error or "Payment failed", 402, toasts=toasts)

    if not result.persisted:
        current_app.logger.error(
            "Donation %s charged but not recorded; reconcile manually", result.confirmation.transaction_id
        )

    session[CONFIRMATION_KEY] = result.confirmation.as_dict()
    return json_ok(
        {
            "redirect": url_for("donate.donation_success"),
            "confirmation": result.confirmation.as_dict(),
            "toasts": toasts,
        }
    )


@bp.get("/donation-success")
def donation_success():
    data = session.get(CONFIRMATION_KEY)
    if not data:
        return redirect(url_for("donate.donate_page"))
    return render_template("donation_success.html", confirmation=Confirmation.from_dict(data))


@bp.get("/payments/config")
def payments_config():
    cfg = current_app.config
    gateway = _gateway()
    return json_ok(
        {
            "publishableKey": cfg.get("STRIPE_PUBLISHABLE_KEY") or "",
            "mode": current_app.extensions.get("stripe_mode", "disabled"),
            "currency": getattr(gateway, "currency", cfg.get("DEFAULT_CURRENCY") or "usd"),
            "demo": getattr(gateway, "demo", False),
        }
    )
