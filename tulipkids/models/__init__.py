from __future__ import annotations

from tulipkids.extensions import db
from tulipkids.models.donation import DONATION_STATUSES, WEBSITE_DONATION, Donation
from tulipkids.models.registration import PAYMENT_STATUSES, Registration
from tulipkids.models.user import User

# Table name -> model, used by the record store.
MODELS_BY_TABLE = {
    Registration.__tablename__: Registration,
    Donation.__tablename__: Donation,
}

__all__ = [
    "db",
    "Donation",
    "Registration",
    "User",
    "MODELS_BY_TABLE",
    "DONATION_STATUSES",
    "PAYMENT_STATUSES",
    "WEBSITE_DONATION",
]
