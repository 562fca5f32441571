# tulipkids/services/reconciliation.py
"""
Admin reconciliation dashboard.

State is a pair of in-memory lists (registrations, donations) loaded from the
record store. Statistics and filtered views are pure functions of those lists.
Mutations follow patch-then-reload: the local copy is patched first, the
store update is issued, and a successful update triggers a full reload. A
failed update leaves the local patch in place until the next reload.
"""

from __future__ import annotations

import logging
import random
import string
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from tulipkids.helpers.csv_export import EXPORT_KINDS, ExportFile, build_export
from tulipkids.models import DONATION_STATUSES, PAYMENT_STATUSES
from tulipkids.models.mixins import utcnow
from tulipkids.notify import Notifier
from tulipkids.records import DonationRecord, RecordShapeError, RegistrationRecord, records_from_rows
from tulipkids.services.record_store import RecordStore, RecordStoreError

log = logging.getLogger(__name__)

REGISTRATION_FILTERS = ("all",) + PAYMENT_STATUSES
DONATION_FILTERS = ("all",) + DONATION_STATUSES

_TX_ALPHABET = string.ascii_lowercase + string.digits

T = TypeVar("T", RegistrationRecord, DonationRecord)


# ─────────────────────────────────────────────────────────────
# Statistics
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class DashboardStats:
    total_registrations: int = 0
    total_participants: int = 0
    total_paid: int = 0
    total_pending: int = 0
    total_revenue: float = 0.0
    total_donations: int = 0
    total_donation_amount: float = 0.0

    @property
    def combined_revenue(self) -> float:
        return self.total_revenue + self.total_donation_amount

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["combined_revenue"] = self.combined_revenue
        return data


def compute_stats(registrations: Sequence[RegistrationRecord], donations: Sequence[DonationRecord]) -> DashboardStats:
    paid = [r for r in registrations if r.payment_status == "paid"]
    return DashboardStats(
        total_registrations=len(registrations),
        total_participants=sum(r.adult_count + r.kids_count for r in registrations),
        total_paid=len(paid),
        total_pending=sum(1 for r in registrations if r.payment_status == "pending"),
        total_revenue=sum(r.total_amount for r in paid),
        total_donations=len(donations),
        total_donation_amount=sum(d.amount for d in donations if d.status == "completed"),
    )


# ─────────────────────────────────────────────────────────────
# Search / filter
# ─────────────────────────────────────────────────────────────
def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def registration_matches(reg: RegistrationRecord, query: str) -> bool:
    return any(_contains(v, query) for v in (reg.name, reg.email, reg.family_category))


def donation_matches(don: DonationRecord, query: str) -> bool:
    return any(_contains(v, query) for v in (f"{don.first_name} {don.last_name}", don.email, don.designation))


def status_matches(value: str, status_filter: str) -> bool:
    return status_filter == "all" or value == status_filter


def filter_registrations(
    registrations: Sequence[RegistrationRecord], query: str = "", status: str = "all"
) -> List[RegistrationRecord]:
    return [r for r in registrations if registration_matches(r, query) and status_matches(r.payment_status, status)]


def filter_donations(donations: Sequence[DonationRecord], query: str = "", status: str = "all") -> List[DonationRecord]:
    return [d for d in donations if donation_matches(d, query) and status_matches(d.status, status)]


# ─────────────────────────────────────────────────────────────
# Patches
# ─────────────────────────────────────────────────────────────
def new_transaction_id(rng: Optional[random.Random] = None) -> str:
    """Placeholder reference for manually confirmed payments: ``tx_`` + 9 chars of [a-z0-9]."""
    pick = (rng or random).choices
    return "tx_" + "".join(pick(_TX_ALPHABET, k=9))


def payment_status_patch(
    status: str, *, now: Optional[datetime] = None, rng: Optional[random.Random] = None
) -> Dict[str, Any]:
    if status not in PAYMENT_STATUSES:
        raise ValueError(f"invalid payment status: {status!r}")
    return {
        "payment_status": status,
        "transaction_id": new_transaction_id(rng) if status == "paid" else None,
        "updated_at": (now or utcnow()).isoformat(),
    }


def donation_status_patch(status: str, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    if status not in DONATION_STATUSES:
        raise ValueError(f"invalid donation status: {status!r}")
    return {"status": status, "updated_at": (now or utcnow()).isoformat()}


def certificate_patch() -> Dict[str, Any]:
    return {"certificate_sent": True}


def apply_patch(records: Sequence[T], record_id: str, patch: Dict[str, Any]) -> List[T]:
    """Local phase of an update: same list with the matching record patched."""
    return [r.with_patch(patch) if r.id == record_id else r for r in records]


# ─────────────────────────────────────────────────────────────
# Dashboard
# ─────────────────────────────────────────────────────────────
class AdminDashboard:
    def __init__(
        self,
        store: RecordStore,
        notifier: Notifier,
        *,
        query: str = "",
        registration_filter: str = "all",
        donation_filter: str = "all",
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.query = query or ""
        self.registration_filter = registration_filter if registration_filter in REGISTRATION_FILTERS else "all"
        self.donation_filter = donation_filter if donation_filter in DONATION_FILTERS else "all"
        self.rng = rng

        self.registrations: List[RegistrationRecord] = []
        self.donations: List[DonationRecord] = []
        self.stats = compute_stats([], [])

    # ---- loading ----
    def _read(self, table: str, cls: Callable[..., Any]) -> Optional[list]:
        try:
            rows = self.store.select(table, order_by="created_at", descending=True)
            return records_from_rows(cls, rows)
        except (RecordStoreError, RecordShapeError) as exc:
            log.error("Error fetching %s: %s", table, exc)
            return None

    def load(self) -> bool:
        """Authoritative phase: replace both lists from the store and recompute stats."""
        regs = self._read("registrations", RegistrationRecord)
        dons = self._read("donations", DonationRecord)

        if regs is not None:
            self.registrations = regs
        if dons is not None:
            self.donations = dons
        self.stats = compute_stats(self.registrations, self.donations)

        if regs is None or dons is None:
            self.notifier.error("Failed to load data", "Please try again or contact support")
            return False
        log.info("dashboard loaded: %d registrations, %d donations", len(self.registrations), len(self.donations))
        return True

    reload = load

    # ---- views ----
    @property
    def filtered_registrations(self) -> List[RegistrationRecord]:
        return filter_registrations(self.registrations, self.query, self.registration_filter)

    @property
    def filtered_donations(self) -> List[DonationRecord]:
        return filter_donations(self.donations, self.query, self.donation_filter)

    # ---- mutations ----
    def _mutate(self, table: str, record_id: str, patch: Dict[str, Any], ok_msg: str, err_msg: str, *, reload: bool) -> bool:
        if table == "registrations":
            self.registrations = apply_patch(self.registrations, record_id, patch)
        else:
            self.donations = apply_patch(self.donations, record_id, patch)

        try:
            self.store.update(table, record_id, patch)
        except RecordStoreError as exc:
            log.error("%s (%s id=%s): %s", err_msg, table, record_id, exc)
            self.notifier.error(err_msg)
            return False

        self.notifier.success(ok_msg)
        if reload:
            self.reload()
        return True

    def update_payment_status(self, record_id: str, status: str) -> bool:
        patch = payment_status_patch(status, rng=self.rng)
        return self._mutate(
            "registrations",
            record_id,
            patch,
            f"Payment status updated to {status}",
            "Failed to update payment status",
            reload=True,
        )

    def update_donation_status(self, record_id: str, status: str) -> bool:
        return self._mutate(
            "donations",
            record_id,
            donation_status_patch(status),
            f"Donation status updated to {status}",
            "Failed to update donation status",
            reload=True,
        )

    def send_certificate(self, record_id: str) -> bool:
        """Bookkeeping only; no email goes out."""
        return self._mutate(
            "donations",
            record_id,
            certificate_patch(),
            "Certificate sent successfully",
            "Failed to send certificate",
            reload=False,
        )

    # ---- export ----
    def export_data(self, kind: str, today: Optional[date] = None) -> ExportFile:
        if kind not in EXPORT_KINDS:
            raise ValueError(f"unknown export kind: {kind!r}")
        records = self.filtered_registrations if kind == "registrations" else self.filtered_donations
        return build_export(kind, records, today=today)
