"""
Typed views over rows returned by the record store.

Rows cross the store boundary as plain mappings (column name -> value). The
dashboard works on these frozen pydantic models instead; a row's shape is
checked once, when it is validated into a record.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, TypeAdapter, ValidationError, field_validator, model_validator


class RecordShapeError(ValueError):
    """A row from the store is missing its id or carries a value of the wrong type."""


_TIMESTAMP = TypeAdapter(datetime)


def _naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_timestamp(value: Any, *, column: str = "timestamp") -> Optional[datetime]:
    """Accept datetimes or ISO-8601 strings (``Z`` suffix included); return naive UTC."""
    if value is None or value == "":
        return None
    try:
        return _naive_utc(_TIMESTAMP.validate_python(value))
    except ValidationError as exc:
        raise RecordShapeError(f"{column}: not an ISO-8601 timestamp: {value!r}") from exc


R = TypeVar("R", bound="_Record")


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _nulls_take_defaults(cls, data: Any) -> Any:
        # NULL columns fall back to the field default
        if isinstance(data, Mapping):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("created_at", "updated_at")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return _naive_utc(value) if value is not None else None

    @classmethod
    def from_row(cls: Type[R], row: Mapping[str, Any]) -> R:
        try:
            return cls.model_validate(row)
        except ValidationError as exc:
            raise RecordShapeError(f"{cls.__name__}: {exc}") from exc

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def with_patch(self: R, patch: Mapping[str, Any]) -> R:
        """Return a copy with ``patch`` merged in and re-validated."""
        unknown = set(patch) - set(type(self).model_fields)
        if unknown:
            raise RecordShapeError(f"unknown column(s) in patch: {', '.join(sorted(unknown))}")
        return type(self).from_row({**self.model_dump(), **patch})


class RegistrationRecord(_Record):
    name: str = ""
    email: str = ""
    phone: str = ""
    adult_count: int = Field(0, ge=0)
    kids_count: int = Field(0, ge=0)
    family_category: str = ""
    total_amount: float = 0.0
    payment_status: Literal["pending", "paid"] = "pending"
    transaction_id: str | None = None
    is_tulip_parent: StrictBool = False
    t_shirt_sizes: tuple[str, ...] = ()

    @property
    def participants(self) -> int:
        return self.adult_count + self.kids_count

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


class DonationRecord(_Record):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    amount: float = 0.0
    designation: str = ""
    is_anonymous: StrictBool = False
    payment_id: str = ""
    donation_type: str = ""
    status: Literal["pending", "completed"] = "completed"
    certificate_sent: StrictBool | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name.strip()} {self.last_name.strip()}".strip()

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def can_send_certificate(self) -> bool:
        """The send control stays enabled until the flag is set once."""
        return not self.certificate_sent


RECORD_TYPES: Dict[str, Type[_Record]] = {
    "registrations": RegistrationRecord,
    "donations": DonationRecord,
}


def records_from_rows(cls: Type[R], rows: List[Mapping[str, Any]]) -> List[R]:
    return [cls.from_row(r) for r in rows]
