from __future__ import annotations

# -----------------------------------------------------------------------------
# Registration Model
# Family event registrations. Rows are created by the external registration
# flow; the admin dashboard only corrects payment_status / transaction_id.
# -----------------------------------------------------------------------------
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from tulipkids.extensions import db

from .mixins import TimestampMixin

PAYMENT_STATUSES = ("pending", "paid")


class Registration(db.Model, TimestampMixin):
    __tablename__ = "registrations"
    __table_args__ = (
        CheckConstraint("adult_count >= 0", name="ck_registrations_adults_nonneg"),
        CheckConstraint("kids_count >= 0", name="ck_registrations_kids_nonneg"),
        Index("ix_registrations_status_created", "payment_status", "created_at"),
    )

    # ---- Identity / contact ----
    id: Mapped[str] = mapped_column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(db.String(160), nullable=False)
    email: Mapped[str] = mapped_column(db.String(160), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(db.String(40), nullable=False, default="")

    # ---- Party composition ----
    adult_count: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)
    kids_count: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)
    family_category: Mapped[str] = mapped_column(db.String(80), nullable=False, default="")
    is_tulip_parent: Mapped[bool] = mapped_column(db.Boolean, nullable=False, default=False)
    t_shirt_sizes: Mapped[List[str]] = mapped_column(db.JSON, nullable=False, default=list)

    # ---- Money / lifecycle ----
    total_amount: Mapped[float] = mapped_column(
        db.Numeric(10, 2, asdecimal=False),
        nullable=False,
        default=0,
        doc="Registration fee in currency units (dollars)",
    )
    payment_status: Mapped[str] = mapped_column(db.String(20), nullable=False, default="pending", index=True)
    transaction_id: Mapped[Optional[str]] = mapped_column(
        db.String(120),
        nullable=True,
        doc="Set only while payment_status == 'paid'",
    )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "adult_count": int(self.adult_count or 0),
            "kids_count": int(self.kids_count or 0),
            "family_category": self.family_category,
            "total_amount": float(self.total_amount or 0),
            "payment_status": self.payment_status,
            "transaction_id": self.transaction_id,
            "is_tulip_parent": bool(self.is_tulip_parent),
            "t_shirt_sizes": list(self.t_shirt_sizes or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Registration {self.name} {self.payment_status} ${float(self.total_amount or 0):,.2f}>"
