# tulipkids/services/record_store.py
"""
Record store: ordered read, filtered read, insert and partial update over the
``registrations`` and ``donations`` tables.

Every operation runs under an ``AuthContext`` and is checked against an
``AccessPolicy`` before touching the database. The policy is a plain
allow/deny table: public visitors may insert (the donation form writes with
no login), only admins may read or update.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from sqlalchemy import asc, desc, select
from sqlalchemy import update as sa_update
from sqlalchemy.exc import SQLAlchemyError

from tulipkids.extensions import db
from tulipkids.models import MODELS_BY_TABLE
from tulipkids.records import RecordShapeError, parse_timestamp

log = logging.getLogger(__name__)


class RecordStoreError(RuntimeError):
    """A store operation failed (database error, unknown table/column)."""


class AccessDenied(RecordStoreError):
    """The caller's AuthContext is not allowed to perform the operation."""


# ─────────────────────────────────────────────────────────────
# Authorization
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class AuthContext:
    user_id: Optional[str] = None
    email: Optional[str] = None
    authenticated: bool = False
    is_admin: bool = False

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def from_user(cls, user: Any) -> "AuthContext":
        if user is None or not getattr(user, "is_authenticated", False):
            return cls.anonymous()
        return cls(
            user_id=str(user.get_id()),
            email=getattr(user, "email", None),
            authenticated=True,
            is_admin=bool(getattr(user, "is_admin", False)),
        )

    @property
    def role(self) -> str:
        if self.is_admin:
            return "admin"
        return "authenticated" if self.authenticated else "anon"


# (table, action) -> roles allowed
DEFAULT_POLICIES: Dict[tuple, FrozenSet[str]] = {
    ("donations", "insert"): frozenset({"anon", "authenticated", "admin"}),
    ("donations", "select"): frozenset({"admin"}),
    ("donations", "update"): frozenset({"admin"}),
    ("registrations", "insert"): frozenset({"anon", "authenticated", "admin"}),
    ("registrations", "select"): frozenset({"admin"}),
    ("registrations", "update"): frozenset({"admin"}),
}


class AccessPolicy:
    def __init__(self, rules: Optional[Mapping[tuple, FrozenSet[str]]] = None):
        self.rules = dict(rules if rules is not None else DEFAULT_POLICIES)

    def allows(self, table: str, action: str, ctx: AuthContext) -> bool:
        return ctx.role in self.rules.get((table, action), frozenset())

    def check(self, table: str, action: str, ctx: AuthContext) -> None:
        if not self.allows(table, action, ctx):
            raise AccessDenied(f"{ctx.role} may not {action} {table}")


# ─────────────────────────────────────────────────────────────
# Store interface
# ─────────────────────────────────────────────────────────────
class RecordStore(ABC):
    """Rows go in and come out as plain dicts keyed by column name."""

    @abstractmethod
    def select(
        self,
        table: str,
        *,
        order_by: str = "created_at",
        descending: bool = True,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def insert(self, table: str, row: Mapping[str, Any]) -> Dict[str, Any]: ...

    @abstractmethod
    def update(self, table: str, record_id: str, patch: Mapping[str, Any]) -> int:
        """Apply ``patch`` to the row with ``id == record_id``; return rows matched."""


class SqlRecordStore(RecordStore):
    """RecordStore over the Flask-SQLAlchemy session."""

    def __init__(self, auth: Optional[AuthContext] = None, policy: Optional[AccessPolicy] = None, session=None):
        self.auth = auth or AuthContext.anonymous()
        self.policy = policy or AccessPolicy()
        self.session = session or db.session

    # ---- helpers ----
    @staticmethod
    def _model(table: str):
        model = MODELS_BY_TABLE.get(table)
        if model is None:
            raise RecordStoreError(f"unknown table: {table}")
        return model

    @staticmethod
    def _coerce(model, values: Mapping[str, Any]) -> Dict[str, Any]:
        columns = model.__table__.columns
        out: Dict[str, Any] = {}
        for key, value in values.items():
            if key not in columns:
                raise RecordStoreError(f"{model.__tablename__}: unknown column {key!r}")
            if isinstance(columns[key].type, db.DateTime) and isinstance(value, str):
                try:
                    value = parse_timestamp(value, column=key)
                except RecordShapeError as exc:
                    raise RecordStoreError(str(exc)) from exc
            out[key] = value
        return out

    def _fail(self, action: str, table: str, exc: Exception) -> RecordStoreError:
        self.session.rollback()
        log.error("record store %s on %s failed: %s", action, table, exc, exc_info=True)
        return RecordStoreError(f"{action} {table} failed: {exc}")

    # ---- operations ----
    def select(self, table, *, order_by="created_at", descending=True, filters=None):
        self.policy.check(table, "select", self.auth)
        model = self._model(table)
        if order_by not in model.__table__.columns:
            raise RecordStoreError(f"{table}: cannot order by unknown column {order_by!r}")

        stmt = select(model)
        for key, value in self._coerce(model, filters or {}).items():
            stmt = stmt.where(getattr(model, key) == value)
        col = getattr(model, order_by)
        stmt = stmt.order_by(desc(col) if descending else asc(col))

        try:
            rows = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise self._fail("select", table, exc) from exc
        return [r.as_dict() for r in rows]

    def insert(self, table, row):
        self.policy.check(table, "insert", self.auth)
        model = self._model(table)
        obj = model(**self._coerce(model, row))
        try:
            self.session.add(obj)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("insert", table, exc) from exc
        return obj.as_dict()

    def update(self, table, record_id, patch):
        self.policy.check(table, "update", self.auth)
        model = self._model(table)
        values = self._coerce(model, patch)
        if "id" in values:
            raise RecordStoreError(f"{table}: id is immutable")

        stmt = sa_update(model).where(model.id == record_id).values(**values)
        try:
            result = self.session.execute(stmt)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("update", table, exc) from exc

        matched = int(result.rowcount or 0)
        if not matched:
            log.warning("record store update on %s matched no row for id=%s", table, record_id)
        return matched
