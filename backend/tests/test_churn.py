from datetime import date, timedelta
from decimal import Decimal

from app.models.enums import PaymentHistory, RiskLevel
from app.services.aggregator import ClientAnalytic
from app.services.churn import (
    ACTION_PAYMENT_TERMS,
    ACTION_REACH_OUT,
    ACTION_UPSELL,
    churn_score,
    risk_level_for,
    score_churn_risk,
)


TODAY = date(2026, 6, 30)


def _client(
    name: str,
    *,
    days_ago: int,
    gap: str | None,
    delay: str,
    revenue: str,
    invoices: int,
) -> ClientAnalytic:
    total = Decimal(revenue)
    return ClientAnalytic(
        client_id=name,
        client_name=name,
        total_revenue=total,
        invoice_count=invoices,
        average_invoice_value=total / invoices,
        last_invoice_date=TODAY - timedelta(days=days_ago),
        payment_history=PaymentHistory.good,
        days_to_pay_average=Decimal('30'),
        average_payment_delay_days=Decimal(delay),
        average_invoice_gap_days=Decimal(gap) if gap is not None else None,
    )


def test_lapsed_low_value_client_is_critical() -> None:
    rows = score_churn_risk(
        [_client('Dormant Ltd', days_ago=90, gap='30', delay='20', revenue='500', invoices=2)],
        today=TODAY,
    )

    assert len(rows) == 1
    assert rows[0].risk_score == Decimal('90.00')
    assert rows[0].risk_level == RiskLevel.critical
    assert rows[0].recommended_actions == [ACTION_REACH_OUT, ACTION_PAYMENT_TERMS, ACTION_UPSELL]


def test_risk_level_boundaries() -> None:
    assert risk_level_for(Decimal('24.99')) == RiskLevel.low
    assert risk_level_for(Decimal('25')) == RiskLevel.medium
    assert risk_level_for(Decimal('50')) == RiskLevel.high
    assert risk_level_for(Decimal('75')) == RiskLevel.critical


def test_score_stays_within_bounds() -> None:
    worst = churn_score(
        days_since_last_invoice=Decimal('1000'),
        average_invoice_gap=Decimal('1'),
        average_payment_delay=Decimal('1000'),
        total_revenue=Decimal('0'),
        invoice_count=1,
    )
    best = churn_score(
        days_since_last_invoice=Decimal('0'),
        average_invoice_gap=Decimal('30'),
        average_payment_delay=Decimal('0'),
        total_revenue=Decimal('50000'),
        invoice_count=40,
    )

    assert worst == Decimal('100.00')
    assert best == Decimal('0.00')


def test_missing_gap_falls_back_to_thirty_days() -> None:
    rows = score_churn_risk(
        [_client('One Off', days_ago=15, gap=None, delay='0', revenue='6000', invoices=1)],
        today=TODAY,
    )

    # 15 / 30 * 40 recency plus 10 for low frequency
    assert rows[0].risk_score == Decimal('30.00')
    assert rows[0].risk_level == RiskLevel.medium
    assert rows[0].recommended_actions == []


def test_results_sorted_by_descending_score() -> None:
    clients = [
        _client('Steady', days_ago=2, gap='10', delay='0', revenue='20000', invoices=12),
        _client('Slipping', days_ago=40, gap='10', delay='30', revenue='2000', invoices=4),
        _client('Middling', days_ago=10, gap='10', delay='5', revenue='4000', invoices=5),
    ]

    rows = score_churn_risk(clients, today=TODAY)

    assert [row.client_name for row in rows] == ['Slipping', 'Middling', 'Steady']
    assert [row.risk_level for row in rows] == [RiskLevel.critical, RiskLevel.high, RiskLevel.low]
