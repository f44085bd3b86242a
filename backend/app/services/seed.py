from __future__ import annotations

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.invoice import Invoice
from app.services.demo import generate_demo_records
from app.services.records import default_window


def seed_demo_data(db: Session, *, today: date | None = None) -> int:
    """Load demo invoices for the demo account unless it already has some."""
    settings = get_settings()
    account_id = settings.demo_account_id
    existing = db.scalar(select(func.count(Invoice.id)).where(Invoice.account_id == account_id)) or 0
    if existing:
        return 0

    window = default_window(settings.default_window_days, today=today)
    records = generate_demo_records(window, seed=settings.demo_seed)
    db.add_all(
        [
            Invoice(
                account_id=account_id,
                invoice_number=record.invoice_number or record.id,
                client_name=record.client_name,
                total=record.amount,
                status=record.status,
                due_date=record.due_date,
                paid_at=record.paid_at,
                created_at=record.created_at,
            )
            for record in records
        ]
    )
    db.commit()
    return len(records)
