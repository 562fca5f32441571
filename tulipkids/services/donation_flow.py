# tulipkids/services/donation_flow.py
"""
Website donation flow: intent -> card confirmation -> donations row -> success page.

Failure policy
  * intent creation fails, no card payment method, or Stripe reports an
    error: "Payment failed" toast, nothing written.
  * the charge succeeds but the donations insert fails: logged only. The
    donor still lands on the success page, leaving a charge with no row that
    admins have to reconcile against the Stripe dashboard by hand.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from tulipkids.models.donation import WEBSITE_DONATION
from tulipkids.models.mixins import utcnow
from tulipkids.notify import Notifier
from tulipkids.services.payments import BillingDetails, GatewayError, PaymentGateway, to_minor_units
from tulipkids.services.record_store import RecordStore, RecordStoreError

log = logging.getLogger(__name__)

SUCCESS_PATH = "/donation-success"
IN_FLIGHT_ERROR = "A payment is already being processed"


@dataclass(frozen=True)
class DonationInput:
    first_name: str
    last_name: str
    email: str
    amount: Decimal
    designation: Optional[str] = None
    is_anonymous: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_form(cls, form: Any) -> "DonationInput":
        return cls(
            first_name=form.first_name.data.strip(),
            last_name=form.last_name.data.strip(),
            email=form.email.data.strip(),
            amount=Decimal(form.amount.data),
            designation=(form.designation.data or "").strip() or None,
            is_anonymous=bool(form.is_anonymous.data),
        )


@dataclass(frozen=True)
class Confirmation:
    """What the success page shows."""

    name: str
    email: str
    amount: float
    designation: Optional[str]
    is_anonymous: bool
    transaction_id: str

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Confirmation":
        return cls(**{k: data.get(k) for k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class SubmissionResult:
    ok: bool
    redirect_to: Optional[str] = None
    confirmation: Optional[Confirmation] = None
    error: Optional[str] = None
    persisted: bool = False


class InFlightFlag:
    """Advisory busy flag; the only guard against double submission."""

    def __init__(self) -> None:
        self.active = False


class DonationSubmission:
    def __init__(
        self,
        gateway: PaymentGateway,
        store: RecordStore,
        notifier: Notifier,
        *,
        org_name: str = "Tulip Kids Foundation",
        flag: Optional[InFlightFlag] = None,
    ):
        self.gateway = gateway
        self.store = store
        self.notifier = notifier
        self.org_name = org_name
        self.flag = flag or InFlightFlag()

    @property
    def processing(self) -> bool:
        return self.flag.active

    def describe(self, designation: Optional[str]) -> str:
        return f"Donation to {self.org_name} - {designation or 'General'}"

    @staticmethod
    def donation_row(data: DonationInput, reference: str) -> Dict[str, Any]:
        return {
            "first_name": data.first_name,
            "last_name": data.last_name,
            "email": data.email,
            "amount": float(data.amount),
            "designation": data.designation or "",
            "is_anonymous": bool(data.is_anonymous),
            "payment_id": reference,
            "donation_type": WEBSITE_DONATION,
            "status": "completed",
            "created_at": utcnow().isoformat(),
        }

    def _persist(self, data: DonationInput, reference: str) -> bool:
        try:
            self.store.insert("donations", self.donation_row(data, reference))
            return True
        except RecordStoreError as exc:
            # Payment already captured; carry on to the success page.
            log.error("Database error saving donation for payment %s: %s", reference, exc)
            return False

    def submit(self, data: DonationInput, payment_method: Optional[str]) -> SubmissionResult:
        if self.flag.active:
            return SubmissionResult(ok=False, error=IN_FLIGHT_ERROR)
        try:
            amount_minor = to_minor_units(data.amount)
        except ValueError as exc:
            log.warning("Rejected donation amount: %s", exc)
            return SubmissionResult(ok=False, error=str(exc))

        self.flag.active = True
        try:
            client_secret = self.gateway.create_intent(amount_minor, self.describe(data.designation))

            if not payment_method:
                raise GatewayError("Card element not found")

            result = self.gateway.confirm(
                client_secret,
                payment_method,
                BillingDetails(name=data.full_name, email=data.email),
            )
            if not result.ok:
                raise GatewayError(result.error or "Payment was not confirmed")

            reference = str(result.reference)
            persisted = self._persist(data, reference)

            self.notifier.success("Donation successful!", "Thank you for your generous support.")
            return SubmissionResult(
                ok=True,
                redirect_to=SUCCESS_PATH,
                confirmation=Confirmation(
                    name=data.full_name,
                    email=data.email,
                    amount=float(data.amount),
                    designation=data.designation,
                    is_anonymous=bool(data.is_anonymous),
                    transaction_id=reference,
                ),
                persisted=persisted,
            )
        except GatewayError as exc:
            log.error("Payment error: %s", exc)
            self.notifier.error("Payment failed", "Please try again or contact support")
            return SubmissionResult(ok=False, error=str(exc))
        finally:
            self.flag.active = False
