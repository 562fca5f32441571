"""User model: admin accounts for the reconciliation dashboard."""

from __future__ import annotations

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from tulipkids.extensions import db

from .mixins import TimestampMixin


class User(db.Model, UserMixin, TimestampMixin):
    """
    Dashboard user:
      • Flask-Login compatible
      • Admin flag gates access to registrations/donations
      • is_active doubles as a soft ban
    """

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False, doc="Hashed password (never store plaintext)")
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    name = db.Column(db.String(120), nullable=True)

    def set_password(self, password: str) -> None:
        """Hash & store the given plaintext password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def get_id(self) -> str:  # type: ignore[override]
        return str(self.id)

    @property
    def display_name(self) -> str:
        return self.name or (self.email.split("@")[0] if self.email else f"User-{self.id}")

    def __repr__(self) -> str:  # pragma: no cover
        role = "Admin" if self.is_admin else "User"
        return f"<User {self.email} ({role})>"
