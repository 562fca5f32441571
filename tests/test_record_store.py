from datetime import datetime

import pytest

from tulipkids.extensions import db
from tulipkids.models import Donation, User
from tulipkids.services.record_store import (
    AccessDenied,
    AccessPolicy,
    AuthContext,
    RecordStoreError,
    SqlRecordStore,
)

ADMIN = AuthContext(user_id="1", email="admin@tulipkids.org", authenticated=True, is_admin=True)
MEMBER = AuthContext(user_id="2", email="member@tulipkids.org", authenticated=True)


def _donation_row(**kw):
    row = {
        "first_name": "Ann",
        "last_name": "Lee",
        "email": "ann@mailbox.org",
        "amount": 50.0,
        "designation": "Summer Camp Programs",
        "payment_id": "pi_1",
        "status": "completed",
        "created_at": "2024-03-03T09:30:00Z",
    }
    row.update(kw)
    return row


def test_auth_context_roles(app_ctx):
    assert AuthContext.from_user(None).role == "anon"
    assert MEMBER.role == "authenticated"
    assert ADMIN.role == "admin"

    user = User(email="x@tulipkids.org", is_admin=True)
    user.set_password("pw")
    db.session.add(user)
    db.session.commit()
    ctx = AuthContext.from_user(user)
    assert ctx.role == "admin"
    assert ctx.user_id == str(user.id)


def test_policy_table():
    policy = AccessPolicy()
    anon = AuthContext.anonymous()
    assert policy.allows("donations", "insert", anon)
    assert not policy.allows("donations", "select", anon)
    assert not policy.allows("registrations", "update", MEMBER)
    assert policy.allows("registrations", "update", ADMIN)
    assert not policy.allows("volunteers", "select", ADMIN)


def test_anonymous_insert_allowed_but_reads_denied(app_ctx):
    store = SqlRecordStore()
    row = store.insert("donations", _donation_row())
    assert row["id"]
    assert row["created_at"] == "2024-03-03T09:30:00"

    with pytest.raises(AccessDenied):
        store.select("donations")
    with pytest.raises(AccessDenied):
        store.update("donations", row["id"], {"status": "pending"})
    assert issubclass(AccessDenied, RecordStoreError)


def test_select_orders_and_filters(app_ctx, seeded):
    store = SqlRecordStore(ADMIN)

    regs = store.select("registrations")
    assert [r["id"] for r in regs] == ["r2", "r1"]
    assert [r["id"] for r in store.select("registrations", descending=False)] == ["r1", "r2"]

    pending = store.select("donations", filters={"status": "pending"})
    assert [d["id"] for d in pending] == ["d2"]

    with pytest.raises(RecordStoreError):
        store.select("registrations", order_by="nope")
    with pytest.raises(RecordStoreError):
        store.select("volunteers")


def test_update_by_id(app_ctx, seeded):
    store = SqlRecordStore(ADMIN)
    matched = store.update(
        "donations",
        "d1",
        {"status": "pending", "updated_at": "2024-03-09T12:00:00"},
    )
    assert matched == 1

    d1 = db.session.get(Donation, "d1")
    assert d1.status == "pending"
    assert d1.updated_at == datetime(2024, 3, 9, 12, 0)
    assert db.session.get(Donation, "d2").status == "pending"


def test_update_unknown_id_matches_nothing(app_ctx, seeded):
    assert SqlRecordStore(ADMIN).update("donations", "missing", {"status": "pending"}) == 0


def test_unknown_or_immutable_columns(app_ctx, seeded):
    store = SqlRecordStore(ADMIN)
    with pytest.raises(RecordStoreError):
        store.insert("donations", _donation_row(colour="red"))
    with pytest.raises(RecordStoreError):
        store.update("donations", "d1", {"id": "d9"})
    with pytest.raises(RecordStoreError):
        store.update("donations", "d1", {"updated_at": "not a date"})
