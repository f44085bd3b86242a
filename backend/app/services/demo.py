from __future__ import annotations

import random
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal

from app.models.enums import InvoiceStatus
from app.services.records import AnalyticsWindow, InvoiceRecord, make_record


DEMO_CLIENTS = (
    "Acme Corp",
    "Tech Startup Inc",
    "Design Agency",
    "Creative Agency Ltd",
    "TechCorp Solutions",
    "StartupXYZ",
)
STATUS_WEIGHTS = (
    (InvoiceStatus.paid, 60),
    (InvoiceStatus.sent, 20),
    (InvoiceStatus.overdue, 12),
    (InvoiceStatus.draft, 8),
)


def _pick_status(rng: random.Random) -> InvoiceStatus:
    statuses = [row[0] for row in STATUS_WEIGHTS]
    weights = [row[1] for row in STATUS_WEIGHTS]
    return rng.choices(statuses, weights=weights, k=1)[0]


def _pick_amount(rng: random.Random) -> Decimal:
    bucket = rng.random()
    if bucket < 0.55:
        cents = rng.randint(20_000, 100_000)
    elif bucket < 0.9:
        cents = rng.randint(100_100, 500_000)
    else:
        cents = rng.randint(500_100, 1_200_000)
    return Decimal(cents) / Decimal("100")


def generate_demo_records(
    window: AnalyticsWindow,
    *,
    seed: int,
    max_per_day: int = 2,
) -> list[InvoiceRecord]:
    """Synthetic invoices spread across the window, identical for the same seed."""
    rng = random.Random(seed)
    records: list[InvoiceRecord] = []
    sequence = 0
    for day in window.dates():
        # weekdays carry more volume than weekends
        ceiling = max_per_day if day.weekday() < 5 else max(0, max_per_day - 1)
        for _ in range(rng.randint(0, ceiling)):
            sequence += 1
            created_at = datetime.combine(day, time(hour=rng.randint(8, 18)), tzinfo=timezone.utc)
            status = _pick_status(rng)
            due_date = day + timedelta(days=30)
            paid_at = None
            if status == InvoiceStatus.paid:
                paid_at = created_at + timedelta(days=rng.randint(3, 40))
            records.append(
                make_record(
                    id=f"demo-{sequence}",
                    invoice_number=f"DEMO-{sequence:05d}",
                    created_at=created_at,
                    amount=_pick_amount(rng),
                    status=status,
                    client_name=rng.choice(DEMO_CLIENTS),
                    due_date=due_date,
                    paid_at=paid_at,
                )
            )
    return records
