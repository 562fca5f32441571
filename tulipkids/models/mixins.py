# tulipkids/models/mixins.py
"""Shared SQLAlchemy mixins."""

from datetime import datetime, timezone

from tulipkids.extensions import db


def utcnow() -> datetime:
    """Naive UTC timestamp, the form SQLite and Postgres ``timestamp`` both store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    """Adds created_at and an optional updated_at refreshed on every UPDATE that doesn't set it."""

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, nullable=True, onupdate=utcnow)
