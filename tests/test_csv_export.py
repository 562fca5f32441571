import csv
import io
from datetime import date, datetime

import pytest

from tulipkids.helpers.csv_export import (
    DONATION_HEADERS,
    REGISTRATION_HEADERS,
    build_export,
    donation_row,
    escape_csv,
    registration_row,
)
from tulipkids.records import DonationRecord, RegistrationRecord


def _registration(**kw):
    base = dict(
        id="r1",
        name="Jane Park",
        email="jane@example.com",
        phone="555-0101",
        adult_count=2,
        kids_count=1,
        family_category="Two Parents",
        total_amount=150.0,
        payment_status="pending",
        t_shirt_sizes=("AM", "AL"),
        created_at=datetime(2024, 3, 1, 10, 0),
    )
    base.update(kw)
    return RegistrationRecord(**base)


def _donation(**kw):
    base = dict(
        id="d1",
        first_name="Ann",
        last_name="Lee",
        email="ann@example.com",
        amount=50.0,
        designation="Summer Camp Programs",
        is_anonymous=False,
        payment_id="pi_1",
        donation_type="Website Donation",
        status="completed",
        created_at=datetime(2024, 12, 25, 9, 0),
    )
    base.update(kw)
    return DonationRecord(**base)


def test_escape_quotes_and_commas():
    value = 'John, "Doe"'
    escaped = escape_csv(value)
    assert escaped == '"John, ""Doe"""'
    assert next(csv.reader(io.StringIO(escaped))) == [value]


def test_escape_leaves_plain_values_and_newlines_alone():
    assert escape_csv("plain") == "plain"
    assert escape_csv("line one\nline two") == "line one\nline two"
    assert escape_csv(None) == ""
    assert escape_csv(150.0) == "150"
    assert escape_csv(12.5) == "12.5"


def test_registration_row_columns():
    row = registration_row(_registration())
    assert len(row) == len(REGISTRATION_HEADERS)
    assert row == [
        "Jane Park",
        "jane@example.com",
        "555-0101",
        "2",
        "1",
        "Two Parents",
        "150",
        "pending",
        "N/A",
        "3/1/2024",
        '"AM, AL"',
    ]


def test_registration_row_without_sizes():
    row = registration_row(_registration(t_shirt_sizes=(), payment_status="paid", transaction_id="tx_abc123def"))
    assert row[8] == "tx_abc123def"
    assert row[10] == "N/A"


def test_donation_row_columns():
    row = donation_row(_donation(is_anonymous=True))
    assert len(row) == len(DONATION_HEADERS)
    assert row == [
        "Ann Lee",
        "ann@example.com",
        "50",
        "Summer Camp Programs",
        "Yes",
        "pi_1",
        "Website Donation",
        "completed",
        "12/25/2024",
    ]


def test_build_export_roundtrips_through_csv_reader():
    tricky = _registration(name='John, "Doe"')
    out = build_export("registrations", [tricky, _registration(id="r2")], today=date(2024, 3, 9))

    assert out.filename == "registrations-2024-03-09.csv"
    assert out.mimetype.startswith("text/csv")
    assert "\r\n" not in out.content

    rows = list(csv.reader(io.StringIO(out.content)))
    assert rows[0] == REGISTRATION_HEADERS
    assert rows[1][0] == 'John, "Doe"'
    assert rows[1][10] == "AM, AL"
    assert len(rows) == 3


def test_empty_export_is_header_only():
    out = build_export("donations", [], today=date(2024, 1, 2))
    assert out.content == ",".join(DONATION_HEADERS)
    assert out.filename == "donations-2024-01-02.csv"


def test_unknown_kind():
    with pytest.raises(ValueError):
        build_export("volunteers", [])
