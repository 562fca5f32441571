"""
Donation form for the public donate page.
Card details never pass through here; Stripe Elements tokenizes them in the browser.
"""

from decimal import Decimal

from flask_wtf import FlaskForm
from wtforms import BooleanField, DecimalField, StringField
from wtforms.validators import Email, InputRequired, Length, NumberRange, Optional, StopValidation

DEFAULT_DESIGNATION = "Where Needed Most"
DESIGNATIONS = (
    DEFAULT_DESIGNATION,
    "Summer Camp Programs",
    "Educational Initiatives",
    "Family Support Services",
)
PRESET_AMOUNTS = (25, 50, 100, 250)
# largest value a Numeric(10, 2) column holds
MAX_AMOUNT = Decimal("99999999.99")


def finite_amount(form, field):
    # DecimalField parses "Infinity" and "NaN" into Decimals
    if field.data is not None and not field.data.is_finite():
        raise StopValidation("Amount must be a number")


class DonationForm(FlaskForm):
    first_name = StringField(
        "First Name",
        validators=[InputRequired(message="First name is required"), Length(min=2, message="First name is required")],
    )
    last_name = StringField(
        "Last Name",
        validators=[InputRequired(message="Last name is required"), Length(min=2, message="Last name is required")],
    )
    email = StringField(
        "Email Address",
        validators=[InputRequired(message="Invalid email address"), Email(message="Invalid email address")],
        render_kw={"placeholder": "name@example.com"},
    )
    amount = DecimalField(
        "Donation Amount",
        places=2,
        validators=[
            InputRequired(message="Amount must be at least $1"),
            finite_amount,
            NumberRange(min=1, message="Amount must be at least $1"),
            NumberRange(max=MAX_AMOUNT, message="Amount is too large"),
        ],
        render_kw={"placeholder": "Enter amount", "min": "1", "step": "0.01"},
    )
    designation = StringField(
        "Donation Designation",
        default=DEFAULT_DESIGNATION,
        validators=[Optional(), Length(max=120)],
    )
    is_anonymous = BooleanField("Make my donation anonymous", default=False)
