from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.enums import InvoiceStatus
from app.models.invoice import Invoice
from app.utils.decimal_math import ZERO, money


UNKNOWN_CLIENT = "Unknown Client"


@dataclass(frozen=True)
class AnalyticsWindow:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Window end must not precede window start.",
            )

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def dates(self) -> list[date]:
        return [self.start + timedelta(days=offset) for offset in range(self.days)]

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end


@dataclass(frozen=True)
class InvoiceRecord:
    id: str
    created_at: datetime
    amount: Decimal
    status: InvoiceStatus
    client_name: str
    invoice_number: str | None = None
    due_date: date | None = None
    paid_at: datetime | None = None

    @property
    def created_on(self) -> date:
        return self.created_at.date()

    @property
    def effective_due_date(self) -> date:
        # Invoices without explicit terms are treated as net-30.
        return self.due_date or self.created_on + timedelta(days=30)


def default_window(days: int, *, today: date | None = None) -> AnalyticsWindow:
    end = today or date.today()
    return AnalyticsWindow(start=end - timedelta(days=max(days, 1) - 1), end=end)


def _coerce_status(value: Any) -> InvoiceStatus:
    if isinstance(value, InvoiceStatus):
        return value
    try:
        return InvoiceStatus(str(value))
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown invoice status: {value!r}.",
        ) from exc


def _require_timestamp(record_id: str | int, created_at: datetime | None) -> datetime:
    if created_at is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invoice {record_id} has no creation timestamp.",
        )
    return created_at


def _parse_amount(record_id: str | int, amount: Any) -> Decimal:
    if amount is None:
        return ZERO
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        value = None
    if value is None or not value.is_finite():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invoice {record_id} has an invalid amount: {amount!r}.",
        )
    return value


def make_record(
    *,
    id: str | int,
    created_at: datetime,
    amount: Decimal | int | float | str | None = None,
    status: InvoiceStatus | str = InvoiceStatus.draft,
    client_name: str | None = None,
    invoice_number: str | None = None,
    due_date: date | None = None,
    paid_at: datetime | None = None,
) -> InvoiceRecord:
    return InvoiceRecord(
        id=str(id),
        created_at=_require_timestamp(id, created_at),
        amount=money(_parse_amount(id, amount)),
        status=_coerce_status(status),
        client_name=(client_name or "").strip() or UNKNOWN_CLIENT,
        invoice_number=invoice_number,
        due_date=due_date,
        paid_at=paid_at,
    )


def record_from_invoice(invoice: Invoice) -> InvoiceRecord:
    return make_record(
        id=invoice.id,
        created_at=invoice.created_at,
        amount=invoice.total,
        status=invoice.status,
        client_name=invoice.client_name,
        invoice_number=invoice.invoice_number,
        due_date=invoice.due_date,
        paid_at=invoice.paid_at,
    )


def validate_records(records: Iterable[InvoiceRecord]) -> None:
    negative = [record.id for record in records if record.amount < 0]
    if negative:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invoice amounts must be >= 0 (offending ids: {', '.join(negative[:10])}).",
        )


def fetch_invoice_records(db: Session, account_id: str, window: AnalyticsWindow) -> list[InvoiceRecord]:
    rows = list(
        db.scalars(
            select(Invoice)
            .where(
                Invoice.account_id == account_id,
                Invoice.created_at >= datetime.combine(window.start, time.min),
                Invoice.created_at <= datetime.combine(window.end, time.max),
            )
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        ).all()
    )
    return [record_from_invoice(row) for row in rows]
