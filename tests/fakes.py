"""In-memory stand-ins for the payment gateway and the record store."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

from tulipkids.services.payments import BillingDetails, ConfirmResult, GatewayError, PaymentGateway
from tulipkids.services.record_store import RecordStore, RecordStoreError


class FakeGateway(PaymentGateway):
    def __init__(self, *, fail_intent: bool = False, confirm_error: Optional[str] = None, reference: str = "pi_test_123"):
        self.fail_intent = fail_intent
        self.confirm_error = confirm_error
        self.reference = reference
        self.demo = False
        self.currency = "usd"
        self.intents: List[tuple] = []
        self.confirmations: List[tuple] = []

    def create_intent(self, amount_minor: int, description: str) -> str:
        if self.fail_intent:
            raise GatewayError("intent creation failed")
        self.intents.append((amount_minor, description))
        return f"{self.reference}_secret_xyz"

    def confirm(self, client_secret: str, payment_method: str, billing_details: BillingDetails) -> ConfirmResult:
        self.confirmations.append((client_secret, payment_method, billing_details))
        if self.confirm_error:
            return ConfirmResult(error=self.confirm_error)
        return ConfirmResult(reference=self.reference)


class MemoryRecordStore(RecordStore):
    """Rows kept as dicts per table; any operation can be made to fail."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None, *, fail: Optional[set] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            "registrations": [],
            "donations": [],
            **copy.deepcopy(tables or {}),
        }
        # e.g. {("donations", "insert"), ("registrations", "select")}
        self.fail = set(fail or ())
        self.updates: List[tuple] = []
        self.inserts: List[tuple] = []
        self.selects: List[str] = []

    def _check(self, table: str, action: str) -> None:
        if (table, action) in self.fail:
            raise RecordStoreError(f"{action} {table} failed")

    def select(self, table, *, order_by="created_at", descending=True, filters=None):
        self.selects.append(table)
        self._check(table, "select")
        rows = [dict(r) for r in self.tables[table]]
        for key, value in (filters or {}).items():
            rows = [r for r in rows if r.get(key) == value]
        return sorted(rows, key=lambda r: r.get(order_by) or "", reverse=descending)

    def insert(self, table, row):
        self._check(table, "insert")
        self.inserts.append((table, dict(row)))
        self.tables[table].append(dict(row))
        return dict(row)

    def update(self, table, record_id, patch):
        self._check(table, "update")
        self.updates.append((table, record_id, dict(patch)))
        matched = 0
        for row in self.tables[table]:
            if row.get("id") == record_id:
                row.update(patch)
                matched += 1
        return matched
