from __future__ import annotations

from datetime import datetime

import pytest

from tulipkids import create_app
from tulipkids.config import TestingConfig
from tulipkids.extensions import db
from tulipkids.models import Donation, Registration, User


@pytest.fixture()
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def admin_user(app):
    with app.app_context():
        user = User(email="admin@tulipkids.org", is_admin=True, name="Admin")
        user.set_password("s3cret-pass")
        db.session.add(user)
        db.session.commit()
        return user.id


@pytest.fixture()
def admin_client(client, admin_user):
    resp = client.post("/admin/login", data={"email": "admin@tulipkids.org", "password": "s3cret-pass"})
    assert resp.status_code == 302
    return client


@pytest.fixture()
def seeded(app):
    """Two registrations and two donations with fixed ids and timestamps."""
    rows = [
        Registration(
            id="r1",
            name="Jane Park",
            email="jane@example.com",
            phone="555-0101",
            adult_count=2,
            kids_count=1,
            family_category="Two Parents",
            t_shirt_sizes=["AM", "AL", "YS"],
            total_amount=150,
            payment_status="pending",
            created_at=datetime(2024, 3, 1, 10, 0),
        ),
        Registration(
            id="r2",
            name="Omar Diaz",
            email="omar@example.com",
            phone="555-0102",
            adult_count=1,
            kids_count=2,
            family_category="Single Parent",
            t_shirt_sizes=[],
            total_amount=100,
            payment_status="paid",
            transaction_id="tx_abc123def",
            created_at=datetime(2024, 3, 2, 10, 0),
        ),
        Donation(
            id="d1",
            first_name="Ann",
            last_name="Lee",
            email="ann@example.com",
            amount=50,
            designation="Summer Camp Programs",
            payment_id="pi_1",
            status="completed",
            certificate_sent=False,
            created_at=datetime(2024, 3, 3, 9, 30),
        ),
        Donation(
            id="d2",
            first_name="Bo",
            last_name="Chen",
            email="bo@example.com",
            amount=25,
            designation="Where Needed Most",
            payment_id="pi_2",
            status="pending",
            created_at=datetime(2024, 3, 4, 9, 30),
        ),
    ]
    with app.app_context():
        db.session.add_all(rows)
        db.session.commit()
    return ["r1", "r2", "d1", "d2"]
