# tulipkids/services/payments.py
"""Stripe payment gateway with a demo-mode toggle."""

from __future__ import annotations

import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

import stripe

log = logging.getLogger(__name__)


class GatewayError(RuntimeError):
    """Intent creation or confirmation could not complete."""


@dataclass(frozen=True)
class BillingDetails:
    name: str
    email: str
    address_line1: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class ConfirmResult:
    reference: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.reference) and not self.error


def to_minor_units(amount: Any) -> int:
    """Dollars -> cents, half-up."""
    try:
        dollars = Decimal(str(amount).strip() or "0")
    except InvalidOperation as exc:
        raise ValueError(f"amount must be a number: {amount!r}") from exc
    if not dollars.is_finite():
        raise ValueError(f"amount must be finite: {amount!r}")
    try:
        return int((dollars * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation as exc:
        raise ValueError(f"amount out of range: {amount!r}") from exc


def intent_id_from_secret(client_secret: str) -> str:
    # client secrets look like "pi_123_secret_abc"
    return (client_secret or "").split("_secret_", 1)[0]


class PaymentGateway(ABC):
    @abstractmethod
    def create_intent(self, amount_minor: int, description: str) -> str:
        """Create a payment intent and return its client secret."""

    @abstractmethod
    def confirm(self, client_secret: str, payment_method: str, billing_details: BillingDetails) -> ConfirmResult:
        """Confirm the intent with a card payment method collected by Stripe Elements."""


class StripeGateway(PaymentGateway):
    def __init__(self, currency: str = "usd", *, demo: bool = False):
        self.currency = (currency or "usd").lower()
        self.demo = demo

    # ---------------- intents ----------------
    def create_intent(self, amount_minor: int, description: str) -> str:
        if amount_minor < 100:
            raise GatewayError("Minimum amount is $1.00")

        if self.demo:
            pi_id = f"pi_demo_{secrets.token_hex(8)}"
            log.info("demo intent %s for %s %s", pi_id, amount_minor, self.currency)
            return f"{pi_id}_secret_{secrets.token_hex(8)}"

        try:
            intent = stripe.PaymentIntent.create(
                amount=int(amount_minor),
                currency=self.currency,
                description=description,
                payment_method_types=["card"],
            )
        except stripe.error.StripeError as e:
            msg = getattr(e, "user_message", None) or str(e)
            log.error("Stripe error creating intent: %s", msg, exc_info=True)
            raise GatewayError(msg) from e

        client_secret = getattr(intent, "client_secret", None)
        if not client_secret:
            raise GatewayError("Stripe did not return client_secret")
        log.info("Created Stripe PaymentIntent %s (%s %s)", intent.id, amount_minor, self.currency)
        return client_secret

    # ---------------- confirmation ----------------
    @staticmethod
    def _confirm_params(payment_method: str, billing: BillingDetails) -> Dict[str, Any]:
        params: Dict[str, Any] = {"payment_method": payment_method}
        if billing.email:
            params["receipt_email"] = billing.email
        if billing.address_line1:
            address = {"line1": billing.address_line1}
            if billing.country:
                address["country"] = billing.country
            params["shipping"] = {"name": billing.name, "address": address}
        return params

    def confirm(self, client_secret: str, payment_method: str, billing_details: BillingDetails) -> ConfirmResult:
        pi_id = intent_id_from_secret(client_secret)
        if not pi_id:
            return ConfirmResult(error="Missing payment intent")

        if self.demo:
            return ConfirmResult(reference=pi_id)

        try:
            intent = stripe.PaymentIntent.confirm(pi_id, **self._confirm_params(payment_method, billing_details))
        except stripe.error.CardError as e:
            return ConfirmResult(error=getattr(e, "user_message", None) or str(e))
        except stripe.error.StripeError as e:
            msg = getattr(e, "user_message", None) or str(e)
            log.error("Stripe error confirming %s: %s", pi_id, msg, exc_info=True)
            return ConfirmResult(error=msg)

        status = getattr(intent, "status", "")
        if status != "succeeded":
            return ConfirmResult(error=f"Payment not completed (status: {status or 'unknown'})")
        return ConfirmResult(reference=intent.id)


def gateway_from_config(config: Mapping[str, Any]) -> StripeGateway:
    demo = bool(config.get("DEMO_MODE")) or not config.get("STRIPE_SECRET_KEY")
    return StripeGateway(currency=str(config.get("DEFAULT_CURRENCY") or "usd"), demo=demo)
