# tulipkids/helpers/csv_export.py
"""
CSV export for the admin dashboard.

Quoting rule: a field is wrapped in double quotes only when it contains a
comma or a double quote; embedded quotes are doubled. Newlines stay literal.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Sequence

from tulipkids.records import DonationRecord, RegistrationRecord

EXPORT_KINDS = ("registrations", "donations")

REGISTRATION_HEADERS = [
    "Name",
    "Email",
    "Phone",
    "Adults",
    "Kids",
    "Family Type",
    "Amount",
    "Status",
    "Transaction ID",
    "Date",
    "T-Shirt Sizes",
]

DONATION_HEADERS = [
    "Name",
    "Email",
    "Amount",
    "Designation",
    "Anonymous",
    "Payment ID",
    "Type",
    "Status",
    "Date",
]


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: str
    mimetype: str = "text/csv; charset=utf-8"


def escape_csv(value: Any) -> str:
    if value is None:
        return ""
    s = value if isinstance(value, str) else _plain(value)
    if "," in s or '"' in s:
        return '"' + s.replace('"', '""') + '"'
    return s


def _plain(value: Any) -> str:
    # 150.0 -> "150", 12.5 -> "12.5"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _date(value: Optional[datetime]) -> str:
    if not value:
        return ""
    return f"{value.month}/{value.day}/{value.year}"


def registration_row(reg: RegistrationRecord) -> List[str]:
    return [
        escape_csv(reg.name),
        escape_csv(reg.email),
        escape_csv(reg.phone),
        escape_csv(reg.adult_count),
        escape_csv(reg.kids_count),
        escape_csv(reg.family_category),
        escape_csv(reg.total_amount),
        escape_csv(reg.payment_status),
        escape_csv(reg.transaction_id or "N/A"),
        escape_csv(_date(reg.created_at)),
        escape_csv(", ".join(reg.t_shirt_sizes) if reg.t_shirt_sizes else "N/A"),
    ]


def donation_row(don: DonationRecord) -> List[str]:
    return [
        escape_csv(don.full_name),
        escape_csv(don.email),
        escape_csv(don.amount),
        escape_csv(don.designation),
        escape_csv("Yes" if don.is_anonymous else "No"),
        escape_csv(don.payment_id),
        escape_csv(don.donation_type),
        escape_csv(don.status),
        escape_csv(_date(don.created_at)),
    ]


def render_csv(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    lines = [",".join(headers)]
    lines.extend(",".join(r) for r in rows)
    return "\n".join(lines)


def export_filename(kind: str, today: Optional[date] = None) -> str:
    return f"{kind}-{(today or date.today()).isoformat()}.csv"


def build_export(kind: str, records: Sequence[Any], today: Optional[date] = None) -> ExportFile:
    if kind == "registrations":
        content = render_csv(REGISTRATION_HEADERS, (registration_row(r) for r in records))
    elif kind == "donations":
        content = render_csv(DONATION_HEADERS, (donation_row(d) for d in records))
    else:
        raise ValueError(f"unknown export kind: {kind!r}")
    return ExportFile(filename=export_filename(kind, today), content=content)
