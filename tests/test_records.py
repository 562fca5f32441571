from datetime import datetime, timedelta, timezone

import pytest

from pydantic import ValidationError

from tulipkids.models.mixins import utcnow
from tulipkids.records import DonationRecord, RecordShapeError, RegistrationRecord, parse_timestamp, records_from_rows


def _reg_row(**overrides):
    row = {
        "id": "r1",
        "name": "Jane Park",
        "email": "jane@example.com",
        "phone": "555-0101",
        "adult_count": 2,
        "kids_count": 1,
        "family_category": "Two Parents",
        "total_amount": 150,
        "payment_status": "pending",
        "transaction_id": None,
        "is_tulip_parent": False,
        "t_shirt_sizes": ["AM", "YS"],
        "created_at": "2024-03-01T10:00:00Z",
    }
    row.update(overrides)
    return row


def test_parse_timestamp_accepts_z_suffix_and_returns_naive_utc():
    assert parse_timestamp("2024-03-01T10:00:00Z") == datetime(2024, 3, 1, 10, 0)
    assert parse_timestamp("2024-03-01T12:00:00+02:00") == datetime(2024, 3, 1, 10, 0)
    assert parse_timestamp(None) is None


def test_utcnow_is_naive_utc():
    now = utcnow()
    assert now.tzinfo is None
    assert abs(now - datetime.now(timezone.utc).replace(tzinfo=None)) < timedelta(seconds=5)
    assert parse_timestamp(now.isoformat()) == now


def test_parse_timestamp_rejects_garbage():
    with pytest.raises(RecordShapeError):
        parse_timestamp("yesterday", column="created_at")


def test_registration_from_row():
    rec = RegistrationRecord.from_row(_reg_row())
    assert rec.total_amount == 150.0
    assert rec.t_shirt_sizes == ("AM", "YS")
    assert rec.participants == 3
    assert not rec.is_paid
    assert rec.created_at == datetime(2024, 3, 1, 10, 0)


def test_missing_optional_keys_take_defaults():
    rec = DonationRecord.from_row({"id": "d1", "first_name": "Ann", "last_name": "Lee"})
    assert rec.amount == 0.0
    assert rec.certificate_sent is None
    assert rec.can_send_certificate
    assert rec.full_name == "Ann Lee"


@pytest.mark.parametrize(
    "overrides",
    [
        {"id": None},
        {"adult_count": "two"},
        {"adult_count": 1.5},
        {"total_amount": "lots"},
        {"is_tulip_parent": "yes"},
        {"t_shirt_sizes": "AM"},
        {"email": 42},
        {"payment_status": "refunded"},
        {"kids_count": -1},
    ],
)
def test_bad_shapes_raise(overrides):
    with pytest.raises(RecordShapeError):
        RegistrationRecord.from_row(_reg_row(**overrides))


def test_with_patch_revalidates_and_leaves_original_untouched():
    rec = RegistrationRecord.from_row(_reg_row())
    patched = rec.with_patch({"payment_status": "paid", "transaction_id": "tx_abc", "updated_at": "2024-03-02T00:00:00"})
    assert patched.payment_status == "paid"
    assert patched.updated_at == datetime(2024, 3, 2)
    assert rec.payment_status == "pending"

    with pytest.raises(RecordShapeError):
        rec.with_patch({"nope": 1})


def test_to_row_emits_plain_types():
    row = RegistrationRecord.from_row(_reg_row()).to_row()
    assert row["t_shirt_sizes"] == ["AM", "YS"]
    assert row["created_at"] == "2024-03-01T10:00:00"


def test_null_columns_fall_back_to_defaults():
    rec = RegistrationRecord.from_row(_reg_row(t_shirt_sizes=None, is_tulip_parent=None, phone=None))
    assert rec.t_shirt_sizes == ()
    assert rec.is_tulip_parent is False
    assert rec.phone == ""


def test_records_are_frozen():
    rec = DonationRecord.from_row({"id": "d1", "status": "pending"})
    with pytest.raises(ValidationError):
        rec.status = "completed"


def test_donation_status_must_be_known():
    with pytest.raises(RecordShapeError):
        records_from_rows(DonationRecord, [{"id": "d1", "status": "refunded"}])
    with pytest.raises(ValidationError):
        DonationRecord.model_validate({"id": "d1", "certificate_sent": "yes"})
