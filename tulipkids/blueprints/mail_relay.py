"""
Mail relay for the volunteer page.

  POST /send-volunteer-application   {firstName, lastName, email, phone?, reason}
  GET  /test                         liveness check

Called cross-origin from the static site, so the blueprint is CSRF-exempt
and CORS is enabled for these two paths in the app factory.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from tulipkids.extensions import csrf
from tulipkids.forms import VolunteerApplicationForm, form_from_payload
from tulipkids.services.volunteer_mail import VolunteerApplication, send_volunteer_application

bp = Blueprint("mail_relay", __name__)
csrf.exempt(bp)


@bp.get("/test")
def relay_test():
    return jsonify(message="API server is running")


@bp.post("/send-volunteer-application")
def send_application():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify(success=False, message="Request body must be a JSON object"), 400

    form = form_from_payload(VolunteerApplicationForm, payload)
    if not form.validate():
        return jsonify(success=False, message="Invalid volunteer application", errors=form.errors), 400

    try:
        send_volunteer_application(VolunteerApplication.from_form(form))
    except Exception as exc:  # SMTP, socket or auth failure; no retry
        current_app.logger.exception("Error sending volunteer application email")
        return jsonify(success=False, message="Failed to send email", error=str(exc)), 500

    return jsonify(success=True)
