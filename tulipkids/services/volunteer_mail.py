# tulipkids/services/volunteer_mail.py
"""Volunteer application email: render both templates and send once over SMTP."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from flask import current_app
from flask_mail import Message
from markupsafe import Markup, escape

from tulipkids.config.config import FALLBACK_VOLUNTEER_RECIPIENT
from tulipkids.extensions import get_mail_env, mail

SUBJECT = "New Volunteer Application - Tulip Kids Foundation"
HTML_TEMPLATE = "volunteer-application.html"
TEXT_TEMPLATE = "volunteer-application.txt"
PHONE_FALLBACK = "Not provided"


@dataclass(frozen=True)
class VolunteerApplication:
    first_name: str
    last_name: str
    email: str
    reason: str
    phone: Optional[str] = None

    @classmethod
    def from_form(cls, form: Any) -> "VolunteerApplication":
        return cls(
            first_name=form.firstName.data.strip(),
            last_name=form.lastName.data.strip(),
            email=form.email.data.strip(),
            phone=(form.phone.data or "").strip() or None,
            reason=form.reason.data,
        )

    def context(self, *, html: bool) -> Dict[str, Any]:
        reason: Any = self.reason
        if html:
            # escape first, then keep the line breaks
            reason = Markup("<br>").join(escape(line) for line in self.reason.split("\n"))
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone or PHONE_FALLBACK,
            "reason": reason,
        }


def build_message(application: VolunteerApplication, *, recipient: Optional[str] = None, sender: Optional[str] = None) -> Message:
    env = get_mail_env()
    html = env.get_template(HTML_TEMPLATE).render(**application.context(html=True))
    body = env.get_template(TEXT_TEMPLATE).render(**application.context(html=False))
    return Message(
        subject=SUBJECT,
        recipients=[recipient or FALLBACK_VOLUNTEER_RECIPIENT],
        sender=sender,
        html=html,
        body=body,
    )


def send_volunteer_application(application: VolunteerApplication) -> Message:
    """Single delivery attempt; SMTP errors propagate to the caller."""
    cfg = current_app.config
    msg = build_message(
        application,
        recipient=cfg.get("VOLUNTEER_EMAIL_TO"),
        sender=cfg.get("MAIL_DEFAULT_SENDER") or cfg.get("MAIL_USERNAME"),
    )
    mail.send(msg)
    current_app.logger.info("Volunteer application email sent for %s", application.email)
    return msg
