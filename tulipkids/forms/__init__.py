from __future__ import annotations

from typing import Any, Mapping, Type, TypeVar

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, Email

from .donation_form import DESIGNATIONS, DonationForm, PRESET_AMOUNTS
from .volunteer_form import VolunteerApplicationForm

F = TypeVar("F", bound=FlaskForm)


class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])


def form_from_payload(form_cls: Type[F], payload: Mapping[str, Any]) -> F:
    """
    Bind a JSON payload to a form. JSON booleans become "y"/"" and numbers
    become strings so the WTForms field coercions see what a browser would send.
    """
    data = MultiDict()
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, bool):
            if value:
                data.add(key, "y")
            continue
        data.add(key, value if isinstance(value, str) else str(value))
    return form_cls(formdata=data, meta={"csrf": False})


__all__ = [
    "DESIGNATIONS",
    "PRESET_AMOUNTS",
    "DonationForm",
    "LoginForm",
    "VolunteerApplicationForm",
    "form_from_payload",
]
