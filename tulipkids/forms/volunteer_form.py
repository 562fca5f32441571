"""
Volunteer application payload. Field names match the JSON keys the
volunteer page posts (camelCase).
"""

from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, Optional


class VolunteerApplicationForm(FlaskForm):
    firstName = StringField("First Name", validators=[DataRequired(message="First name is required")])
    lastName = StringField("Last Name", validators=[DataRequired(message="Last name is required")])
    email = StringField("Email", validators=[DataRequired(message="Email is required"), Email()])
    phone = StringField("Phone", validators=[Optional(), Length(max=40)])
    reason = TextAreaField(
        "Why do you want to volunteer?",
        validators=[DataRequired(message="Please tell us why you'd like to volunteer"), Length(max=5000)],
    )
