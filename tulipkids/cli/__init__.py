import random

import click
from faker import Faker
from flask.cli import with_appcontext
from sqlalchemy import func, select

from tulipkids.extensions import db
from tulipkids.forms.donation_form import DESIGNATIONS
from tulipkids.models import WEBSITE_DONATION, Donation, Registration, User
from tulipkids.services.reconciliation import new_transaction_id

fake = Faker()

FAMILY_CATEGORIES = ("Single Parent", "Two Parents", "Grandparents", "Guardian")
T_SHIRT_SIZES = ("YS", "YM", "YL", "AS", "AM", "AL", "AXL")
ADULT_FEE = 25
KID_FEE = 15


@click.command("create-admin")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--name", default=None)
@with_appcontext
def create_admin(email, password, name):
    """Create an admin account, or promote and reset an existing one."""
    email = email.strip().lower()
    user = db.session.execute(select(User).where(func.lower(User.email) == email)).scalar_one_or_none()
    created = user is None
    if created:
        user = User(email=email)
        db.session.add(user)
    user.is_admin = True
    user.is_active = True
    if name:
        user.name = name
    user.set_password(password)
    db.session.commit()
    verb = "Created" if created else "Updated"
    click.secho(f"✅ {verb} admin {email}", fg="bright_green", bold=True)


@click.command("seed-demo")
@click.option("--registrations", default=12, show_default=True)
@click.option("--donations", default=8, show_default=True)
@click.option("--clear", is_flag=True)
@with_appcontext
def seed_demo(registrations, donations, clear):
    """Seed demo registrations and donations."""
    if clear:
        n_regs = Registration.query.delete()
        n_dons = Donation.query.delete()
        click.secho(f"🧹 Cleared {n_regs} registrations and {n_dons} donations", fg="yellow")

    _seed_registrations(registrations)
    _seed_donations(donations)
    db.session.commit()
    click.secho(
        f"✅ Seeded {registrations} registrations and {donations} donations!",
        fg="bright_green",
        bold=True,
    )


# ---------- Helpers ----------
def _seed_registrations(count):
    for _ in range(count):
        adults = random.randint(1, 2)
        kids = random.randint(1, 4)
        paid = random.random() < 0.6
        db.session.add(
            Registration(
                name=fake.name(),
                email=fake.unique.email(),
                phone=fake.phone_number(),
                adult_count=adults,
                kids_count=kids,
                family_category=random.choice(FAMILY_CATEGORIES),
                is_tulip_parent=random.random() < 0.3,
                t_shirt_sizes=random.choices(T_SHIRT_SIZES, k=adults + kids),
                total_amount=adults * ADULT_FEE + kids * KID_FEE,
                payment_status="paid" if paid else "pending",
                transaction_id=new_transaction_id() if paid else None,
                created_at=fake.date_time_between(start_date="-60d", end_date="now"),
            )
        )


def _seed_donations(count):
    for _ in range(count):
        db.session.add(
            Donation(
                first_name=fake.first_name(),
                last_name=fake.last_name(),
                email=fake.unique.email(),
                amount=random.choice((25, 50, 100, 250, round(random.uniform(5, 500), 2))),
                designation=random.choice(DESIGNATIONS),
                is_anonymous=random.random() < 0.2,
                payment_id=f"pi_demo_{fake.hexify('^' * 16)}",
                donation_type=WEBSITE_DONATION,
                status="completed" if random.random() < 0.85 else "pending",
                certificate_sent=False,
                created_at=fake.date_time_between(start_date="-60d", end_date="now"),
            )
        )


def register_cli(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(seed_demo)
