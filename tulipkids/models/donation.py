from __future__ import annotations

# -----------------------------------------------------------------------------
# Donation Model
# Written once by the website donation flow (status=completed, payment_id set
# to the Stripe PaymentIntent id); admins may later demote status to pending
# or mark the tax certificate as sent.
# -----------------------------------------------------------------------------
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from tulipkids.extensions import db

from .mixins import TimestampMixin

DONATION_STATUSES = ("pending", "completed")
WEBSITE_DONATION = "Website Donation"


class Donation(db.Model, TimestampMixin):
    __tablename__ = "donations"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_donations_amount_nonneg"),
        Index("ix_donations_status_created", "status", "created_at"),
    )

    # ---- Identity / donor ----
    id: Mapped[str] = mapped_column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name: Mapped[str] = mapped_column(db.String(80), nullable=False)
    last_name: Mapped[str] = mapped_column(db.String(80), nullable=False)
    email: Mapped[str] = mapped_column(db.String(160), nullable=False, index=True)

    # ---- Financials (dollars) ----
    amount: Mapped[float] = mapped_column(db.Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    designation: Mapped[str] = mapped_column(db.String(120), nullable=False, default="")
    is_anonymous: Mapped[bool] = mapped_column(db.Boolean, nullable=False, default=False)

    # ---- Payment tracking (Stripe) ----
    payment_id: Mapped[str] = mapped_column(
        db.String(120),
        nullable=False,
        default="",
        index=True,
        doc="Stripe PaymentIntent ID (pi_...).",
    )
    donation_type: Mapped[str] = mapped_column(db.String(60), nullable=False, default=WEBSITE_DONATION)
    status: Mapped[str] = mapped_column(db.String(20), nullable=False, default="completed", index=True)
    certificate_sent: Mapped[Optional[bool]] = mapped_column(db.Boolean, nullable=True, default=False)

    @property
    def full_name(self) -> str:
        return f"{(self.first_name or '').strip()} {(self.last_name or '').strip()}".strip()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "amount": float(self.amount or 0),
            "designation": self.designation,
            "is_anonymous": bool(self.is_anonymous),
            "payment_id": self.payment_id,
            "donation_type": self.donation_type,
            "status": self.status,
            "certificate_sent": self.certificate_sent,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Donation {self.full_name} ${float(self.amount or 0):,.2f} {self.status}>"
