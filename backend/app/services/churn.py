from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from app.models.enums import RiskLevel
from app.services.aggregator import ClientAnalytic
from app.utils.decimal_math import ZERO, money


DEFAULT_INVOICE_GAP_DAYS = Decimal("30")
RECENCY_WEIGHT = Decimal("40")
PAYMENT_WEIGHT = Decimal("30")
PAYMENT_DELAY_SCALE_DAYS = Decimal("30")
OVERDUE_GAP_MULTIPLIER = Decimal("1.5")
SLOW_PAYMENT_DAYS = Decimal("14")
LOW_REVENUE = Decimal("1000")
MODEST_REVENUE = Decimal("5000")
LOW_FREQUENCY_INVOICES = 3

ACTION_REACH_OUT = "Reach out to client - overdue for next invoice"
ACTION_PAYMENT_TERMS = "Review payment terms and follow up on outstanding invoices"
ACTION_UPSELL = "Consider upselling additional services"


@dataclass(frozen=True)
class ChurnRiskClient:
    client_id: str
    client_name: str
    risk_score: Decimal
    risk_level: RiskLevel
    last_invoice_date: date
    average_payment_delay: Decimal
    total_revenue: Decimal
    recommended_actions: list[str]


def risk_level_for(score: Decimal) -> RiskLevel:
    if score >= 75:
        return RiskLevel.critical
    if score >= 50:
        return RiskLevel.high
    if score >= 25:
        return RiskLevel.medium
    return RiskLevel.low


def _invoice_gap(client: ClientAnalytic) -> Decimal:
    gap = client.average_invoice_gap_days
    if gap is None or gap <= 0:
        return DEFAULT_INVOICE_GAP_DAYS
    return gap


def churn_score(
    *,
    days_since_last_invoice: Decimal,
    average_invoice_gap: Decimal,
    average_payment_delay: Decimal,
    total_revenue: Decimal,
    invoice_count: int,
) -> Decimal:
    recency = min(RECENCY_WEIGHT, (max(ZERO, days_since_last_invoice) / average_invoice_gap) * RECENCY_WEIGHT)
    payment = min(PAYMENT_WEIGHT, (max(ZERO, average_payment_delay) / PAYMENT_DELAY_SCALE_DAYS) * PAYMENT_WEIGHT)
    if total_revenue < LOW_REVENUE:
        revenue = Decimal("20")
    elif total_revenue < MODEST_REVENUE:
        revenue = Decimal("10")
    else:
        revenue = ZERO
    frequency = Decimal("10") if invoice_count < LOW_FREQUENCY_INVOICES else ZERO
    return money(min(Decimal("100"), max(ZERO, recency + payment + revenue + frequency)))


def recommended_actions(
    *,
    days_since_last_invoice: Decimal,
    average_invoice_gap: Decimal,
    average_payment_delay: Decimal,
    total_revenue: Decimal,
) -> list[str]:
    actions: list[str] = []
    if days_since_last_invoice > average_invoice_gap * OVERDUE_GAP_MULTIPLIER:
        actions.append(ACTION_REACH_OUT)
    if average_payment_delay > SLOW_PAYMENT_DAYS:
        actions.append(ACTION_PAYMENT_TERMS)
    if total_revenue < LOW_REVENUE:
        actions.append(ACTION_UPSELL)
    return actions


def score_churn_risk(clients: list[ClientAnalytic], *, today: date | None = None) -> list[ChurnRiskClient]:
    reference_day = today or date.today()
    rows: list[ChurnRiskClient] = []
    for client in clients:
        days_since = Decimal((reference_day - client.last_invoice_date).days)
        gap = _invoice_gap(client)
        delay = client.average_payment_delay_days
        score = churn_score(
            days_since_last_invoice=days_since,
            average_invoice_gap=gap,
            average_payment_delay=delay,
            total_revenue=client.total_revenue,
            invoice_count=client.invoice_count,
        )
        rows.append(
            ChurnRiskClient(
                client_id=client.client_id,
                client_name=client.client_name,
                risk_score=score,
                risk_level=risk_level_for(score),
                last_invoice_date=client.last_invoice_date,
                average_payment_delay=delay,
                total_revenue=client.total_revenue,
                recommended_actions=recommended_actions(
                    days_since_last_invoice=days_since,
                    average_invoice_gap=gap,
                    average_payment_delay=delay,
                    total_revenue=client.total_revenue,
                ),
            )
        )
    return sorted(rows, key=lambda row: row.risk_score, reverse=True)
