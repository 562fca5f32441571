from decimal import Decimal

import pytest

from tulipkids.notify import RecordingNotifier
from tulipkids.services.donation_flow import (
    IN_FLIGHT_ERROR,
    SUCCESS_PATH,
    Confirmation,
    DonationInput,
    DonationSubmission,
    InFlightFlag,
)

from .fakes import FakeGateway, MemoryRecordStore


def _donor(**kw):
    base = dict(
        first_name="Ann",
        last_name="Lee",
        email="ann@mailbox.org",
        amount=Decimal("50"),
        designation="Summer Camp Programs",
        is_anonymous=False,
    )
    base.update(kw)
    return DonationInput(**base)


@pytest.fixture()
def notifier():
    return RecordingNotifier()


def test_successful_donation(notifier):
    gateway, store = FakeGateway(), MemoryRecordStore()
    flow = DonationSubmission(gateway, store, notifier)

    result = flow.submit(_donor(), "pm_card_visa")

    assert result.ok and result.persisted
    assert result.redirect_to == SUCCESS_PATH
    assert gateway.intents == [(5000, "Donation to Tulip Kids Foundation - Summer Camp Programs")]
    assert gateway.confirmations[0][1] == "pm_card_visa"
    assert gateway.confirmations[0][2].name == "Ann Lee"

    table, row = store.inserts[0]
    assert table == "donations"
    assert row["payment_id"] == "pi_test_123"
    assert row["status"] == "completed"
    assert row["donation_type"] == "Website Donation"
    assert row["amount"] == 50.0
    assert row["created_at"]

    assert notifier.titles == ["Donation successful!"]
    assert result.confirmation == Confirmation(
        name="Ann Lee",
        email="ann@mailbox.org",
        amount=50.0,
        designation="Summer Camp Programs",
        is_anonymous=False,
        transaction_id="pi_test_123",
    )
    assert not flow.processing


def test_missing_designation_is_described_as_general(notifier):
    gateway = FakeGateway()
    DonationSubmission(gateway, MemoryRecordStore(), notifier).submit(_donor(designation=None, amount=Decimal("12.345")), "pm_x")
    assert gateway.intents == [(1235, "Donation to Tulip Kids Foundation - General")]


def test_insert_failure_after_payment_still_succeeds(notifier):
    store = MemoryRecordStore(fail={("donations", "insert")})
    result = DonationSubmission(FakeGateway(), store, notifier).submit(_donor(), "pm_card_visa")

    assert result.ok
    assert not result.persisted
    assert result.redirect_to == SUCCESS_PATH
    assert result.confirmation.transaction_id == "pi_test_123"
    assert notifier.titles == ["Donation successful!"]
    assert store.tables["donations"] == []


@pytest.mark.parametrize(
    "gateway, payment_method",
    [
        (FakeGateway(fail_intent=True), "pm_card_visa"),
        (FakeGateway(), None),
        (FakeGateway(confirm_error="Your card was declined."), "pm_card_visa"),
    ],
    ids=["intent-fails", "no-card", "declined"],
)
def test_gateway_failures_write_nothing(gateway, payment_method, notifier):
    store = MemoryRecordStore()
    flag = InFlightFlag()
    result = DonationSubmission(gateway, store, notifier, flag=flag).submit(_donor(), payment_method)

    assert not result.ok
    assert result.redirect_to is None
    assert store.inserts == []
    assert notifier.titles == ["Payment failed"]
    assert notifier.toasts[0].description == "Please try again or contact support"
    assert not flag.active


def test_missing_card_never_confirms(notifier):
    gateway = FakeGateway()
    result = DonationSubmission(gateway, MemoryRecordStore(), notifier).submit(_donor(), "")
    assert result.error == "Card element not found"
    assert gateway.confirmations == []


def test_in_flight_submission_is_rejected(notifier):
    gateway, flag = FakeGateway(), InFlightFlag()
    flag.active = True

    result = DonationSubmission(gateway, MemoryRecordStore(), notifier, flag=flag).submit(_donor(), "pm_card_visa")

    assert result.error == IN_FLIGHT_ERROR
    assert gateway.intents == []
    assert notifier.toasts == []
    assert flag.active


def test_confirmation_dict_roundtrip():
    c = Confirmation("Ann Lee", "ann@mailbox.org", 50.0, None, True, "pi_1")
    assert Confirmation.from_dict(c.as_dict()) == c


def test_non_finite_amount_is_refused_before_any_charge(notifier):
    gateway, flag = FakeGateway(), InFlightFlag()

    result = DonationSubmission(gateway, MemoryRecordStore(), notifier, flag=flag).submit(
        _donor(amount=Decimal("Infinity")), "pm_card_visa"
    )

    assert not result.ok
    assert "finite" in result.error
    assert gateway.intents == []
    assert not flag.active
