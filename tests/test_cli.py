from sqlalchemy import func, select

from tulipkids.cli import create_admin, seed_demo
from tulipkids.extensions import db
from tulipkids.models import Donation, Registration, User


def _count(app, model):
    with app.app_context():
        return db.session.execute(select(func.count()).select_from(model)).scalar_one()


def test_create_admin(app):
    runner = app.test_cli_runner()
    result = runner.invoke(create_admin, ["Boss@TulipKids.org", "--password", "pw-123", "--name", "Boss"])

    assert result.exit_code == 0, result.output
    assert "Created admin boss@tulipkids.org" in result.output
    with app.app_context():
        user = db.session.execute(select(User)).scalar_one()
        assert user.email == "boss@tulipkids.org"
        assert user.is_admin
        assert user.check_password("pw-123")


def test_create_admin_promotes_existing_user(app, admin_user):
    runner = app.test_cli_runner()
    result = runner.invoke(create_admin, ["admin@tulipkids.org", "--password", "new-pass"])

    assert "Updated admin" in result.output
    assert _count(app, User) == 1
    with app.app_context():
        assert db.session.get(User, admin_user).check_password("new-pass")


def test_seed_demo(app):
    runner = app.test_cli_runner()
    result = runner.invoke(seed_demo, ["--registrations", "5", "--donations", "3"])

    assert result.exit_code == 0, result.output
    assert _count(app, Registration) == 5
    assert _count(app, Donation) == 3

    with app.app_context():
        for reg in db.session.execute(select(Registration)).scalars():
            assert (reg.transaction_id is not None) == (reg.payment_status == "paid")
            assert len(reg.t_shirt_sizes) == reg.adult_count + reg.kids_count


def test_seed_demo_clear(app, seeded):
    runner = app.test_cli_runner()
    result = runner.invoke(seed_demo, ["--registrations", "1", "--donations", "1", "--clear"])

    assert "Cleared 2 registrations and 2 donations" in result.output
    assert _count(app, Registration) == 1
    assert _count(app, Donation) == 1
