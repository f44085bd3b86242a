from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from app.models.enums import InvoiceStatus, MetricFormat, PaymentHistory, TrendDirection
from app.services.records import AnalyticsWindow, InvoiceRecord, validate_records
from app.utils.decimal_math import ZERO, mean, money, safe_pct


TOP_CLIENTS = 10
RECENT_ACTIVITY_LIMIT = 10
DEFAULT_DAYS_TO_PAY = Decimal("30")
SMALL_PROJECT_LIMIT = Decimal("1000")
MEDIUM_PROJECT_LIMIT = Decimal("5000")
CATEGORY_ORDER = ("Small Projects", "Medium Projects", "Large Projects")
CATEGORY_COLORS = ("#3B82F6", "#10B981", "#F59E0B", "#EF4444", "#8B5CF6")
PENDING_STATUSES = {InvoiceStatus.sent, InvoiceStatus.draft}


@dataclass(frozen=True)
class OverviewMetrics:
    total_revenue: Decimal
    total_invoices: int
    average_invoice_value: Decimal
    collection_rate: Decimal
    outstanding_amount: Decimal
    monthly_recurring: Decimal


@dataclass(frozen=True)
class TrendMetric:
    id: str
    name: str
    value: Decimal
    previous_value: Decimal
    change: Decimal
    change_percent: Decimal
    trend: TrendDirection
    format: MetricFormat


@dataclass(frozen=True)
class TimeSeriesPoint:
    date: date
    revenue: Decimal
    invoice_count: int
    paid_count: int
    pending_count: int
    overdue_count: int


@dataclass(frozen=True)
class ClientAnalytic:
    client_id: str
    client_name: str
    total_revenue: Decimal
    invoice_count: int
    average_invoice_value: Decimal
    last_invoice_date: date
    payment_history: PaymentHistory
    days_to_pay_average: Decimal
    average_payment_delay_days: Decimal
    average_invoice_gap_days: Decimal | None


@dataclass(frozen=True)
class CategoryBreakdown:
    category: str
    revenue: Decimal
    percentage: Decimal
    invoice_count: int
    color: str


@dataclass(frozen=True)
class ActivityItem:
    id: str
    type: str
    title: str
    description: str
    amount: Decimal
    timestamp: datetime
    status: InvoiceStatus
    client_name: str


@dataclass(frozen=True)
class AggregateResult:
    overview: OverviewMetrics
    trend_metrics: list[TrendMetric]
    time_series: list[TimeSeriesPoint]
    client_analytics: list[ClientAnalytic]
    category_breakdown: list[CategoryBreakdown]
    recent_activity: list[ActivityItem]


def _total(records: list[InvoiceRecord]) -> Decimal:
    return money(sum((record.amount for record in records), ZERO))


def _month_key(value: date) -> tuple[int, int]:
    return value.year, value.month


def _previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def build_overview(records: list[InvoiceRecord], *, today: date) -> OverviewMetrics:
    paid = [record for record in records if record.status == InvoiceStatus.paid]
    pending = [record for record in records if record.status in PENDING_STATUSES]
    current_month = [record for record in records if _month_key(record.created_on) == _month_key(today)]

    total_revenue = _total(paid)
    total_invoices = len(records)
    return OverviewMetrics(
        total_revenue=total_revenue,
        total_invoices=total_invoices,
        average_invoice_value=money(total_revenue / total_invoices) if total_invoices else money(0),
        collection_rate=safe_pct(Decimal(len(paid)), Decimal(total_invoices)),
        outstanding_amount=_total(pending),
        monthly_recurring=_total(current_month),
    )


def _trend_metric(
    *,
    metric_id: str,
    name: str,
    value: Decimal,
    previous_value: Decimal,
    value_format: MetricFormat,
) -> TrendMetric:
    if value > previous_value:
        trend = TrendDirection.up
    elif value < previous_value:
        trend = TrendDirection.down
    else:
        trend = TrendDirection.neutral
    return TrendMetric(
        id=metric_id,
        name=name,
        value=value,
        previous_value=previous_value,
        change=value - previous_value,
        change_percent=safe_pct(value - previous_value, previous_value),
        trend=trend,
        format=value_format,
    )


def build_trend_metrics(records: list[InvoiceRecord], *, today: date) -> list[TrendMetric]:
    current_key = _month_key(today)
    previous_key = _previous_month(*current_key)
    current = [record for record in records if _month_key(record.created_on) == current_key]
    previous = [record for record in records if _month_key(record.created_on) == previous_key]

    def collection(rows: list[InvoiceRecord]) -> Decimal:
        paid = sum(1 for row in rows if row.status == InvoiceStatus.paid)
        return safe_pct(Decimal(paid), Decimal(len(rows)))

    return [
        _trend_metric(
            metric_id="revenue",
            name="Total Revenue",
            value=_total(current),
            previous_value=_total(previous),
            value_format=MetricFormat.currency,
        ),
        _trend_metric(
            metric_id="invoices",
            name="Invoices Created",
            value=Decimal(len(current)),
            previous_value=Decimal(len(previous)),
            value_format=MetricFormat.number,
        ),
        _trend_metric(
            metric_id="collection_rate",
            name="Collection Rate",
            value=collection(current),
            previous_value=collection(previous),
            value_format=MetricFormat.percentage,
        ),
    ]


def build_time_series(records: list[InvoiceRecord], window: AnalyticsWindow) -> list[TimeSeriesPoint]:
    buckets: dict[date, list[InvoiceRecord]] = {day: [] for day in window.dates()}
    for record in records:
        bucket = buckets.get(record.created_on)
        if bucket is not None:
            bucket.append(record)

    points: list[TimeSeriesPoint] = []
    for day, rows in buckets.items():
        points.append(
            TimeSeriesPoint(
                date=day,
                revenue=_total(rows),
                invoice_count=len(rows),
                paid_count=sum(1 for row in rows if row.status == InvoiceStatus.paid),
                pending_count=sum(1 for row in rows if row.status in PENDING_STATUSES),
                overdue_count=sum(1 for row in rows if row.status == InvoiceStatus.overdue),
            )
        )
    return points


def _payment_delay_days(record: InvoiceRecord, *, today: date) -> int | None:
    if record.status == InvoiceStatus.paid and record.paid_at is not None:
        return max(0, (record.paid_at.date() - record.effective_due_date).days)
    if record.status == InvoiceStatus.overdue:
        return max(0, (today - record.effective_due_date).days)
    return None


def _payment_tier(days_to_pay: Decimal, *, has_overdue: bool) -> PaymentHistory:
    if days_to_pay <= 15:
        tier = PaymentHistory.excellent
    elif days_to_pay <= 30:
        tier = PaymentHistory.good
    elif days_to_pay <= 45:
        tier = PaymentHistory.fair
    else:
        tier = PaymentHistory.poor
    if has_overdue and tier in {PaymentHistory.excellent, PaymentHistory.good}:
        return PaymentHistory.fair
    return tier


def _invoice_gap_days(rows: list[InvoiceRecord]) -> Decimal | None:
    days = sorted({row.created_on for row in rows})
    if len(days) < 2:
        return None
    gaps = [Decimal((later - earlier).days) for earlier, later in zip(days, days[1:])]
    return money(mean(gaps))


def _client_analytic(name: str, rows: list[InvoiceRecord], *, today: date) -> ClientAnalytic:
    total_revenue = _total(rows)
    pay_times = [
        Decimal((row.paid_at.date() - row.created_on).days)
        for row in rows
        if row.status == InvoiceStatus.paid and row.paid_at is not None
    ]
    days_to_pay = money(mean(pay_times)) if pay_times else money(DEFAULT_DAYS_TO_PAY)
    delays = [
        Decimal(delay)
        for delay in (_payment_delay_days(row, today=today) for row in rows)
        if delay is not None
    ]
    has_overdue = any(row.status == InvoiceStatus.overdue for row in rows)
    return ClientAnalytic(
        client_id=name,
        client_name=name,
        total_revenue=total_revenue,
        invoice_count=len(rows),
        average_invoice_value=money(total_revenue / len(rows)),
        last_invoice_date=max(row.created_on for row in rows),
        payment_history=_payment_tier(days_to_pay, has_overdue=has_overdue),
        days_to_pay_average=days_to_pay,
        average_payment_delay_days=money(mean(delays)),
        average_invoice_gap_days=_invoice_gap_days(rows),
    )


def build_client_analytics(records: list[InvoiceRecord], *, today: date) -> list[ClientAnalytic]:
    by_client: dict[str, list[InvoiceRecord]] = {}
    for record in records:
        by_client.setdefault(record.client_name, []).append(record)

    clients = [_client_analytic(name, rows, today=today) for name, rows in by_client.items()]
    # sorted() is stable, so equal revenue keeps first-seen order.
    ranked = sorted(clients, key=lambda row: row.total_revenue, reverse=True)
    return ranked[:TOP_CLIENTS]


def _category_for(amount: Decimal) -> str:
    if amount > MEDIUM_PROJECT_LIMIT:
        return "Large Projects"
    if amount > SMALL_PROJECT_LIMIT:
        return "Medium Projects"
    return "Small Projects"


def build_category_breakdown(records: list[InvoiceRecord]) -> list[CategoryBreakdown]:
    grouped: dict[str, list[InvoiceRecord]] = {}
    for record in records:
        grouped.setdefault(_category_for(record.amount), []).append(record)

    total_revenue = _total(records)
    rows: list[CategoryBreakdown] = []
    for category in CATEGORY_ORDER:
        members = grouped.get(category)
        if not members:
            continue
        revenue = _total(members)
        rows.append(
            CategoryBreakdown(
                category=category,
                revenue=revenue,
                percentage=safe_pct(revenue, total_revenue),
                invoice_count=len(members),
                color=CATEGORY_COLORS[len(rows) % len(CATEGORY_COLORS)],
            )
        )
    return rows


def build_recent_activity(records: list[InvoiceRecord]) -> list[ActivityItem]:
    newest = sorted(records, key=lambda row: row.created_at, reverse=True)[:RECENT_ACTIVITY_LIMIT]
    return [
        ActivityItem(
            id=row.id,
            type="invoice_created",
            title=f"Invoice {row.invoice_number or row.id}",
            description=f"Created for {row.client_name}",
            amount=row.amount,
            timestamp=row.created_at,
            status=row.status,
            client_name=row.client_name,
        )
        for row in newest
    ]


def aggregate(
    records: list[InvoiceRecord],
    window: AnalyticsWindow,
    *,
    today: date | None = None,
) -> AggregateResult:
    rows = list(records)
    validate_records(rows)
    reference_day = today or date.today()
    return AggregateResult(
        overview=build_overview(rows, today=reference_day),
        trend_metrics=build_trend_metrics(rows, today=reference_day),
        time_series=build_time_series(rows, window),
        client_analytics=build_client_analytics(rows, today=reference_day),
        category_breakdown=build_category_breakdown(rows),
        recent_activity=build_recent_activity(rows),
    )
