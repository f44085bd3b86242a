from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import get_settings
from app.db.base import Base
from app.models.enums import AnalyticsSource, InvoiceStatus
from app.models.invoice import Invoice
from app.services.analytics import build_analytics, get_analytics
from app.services.cache import AnalyticsCache
from app.services.demo import generate_demo_records
from app.services.records import AnalyticsWindow, fetch_invoice_records
from app.services.seed import seed_demo_data
from app.utils.decimal_math import money


TODAY = date(2026, 3, 31)
WINDOW = AnalyticsWindow(start=date(2026, 3, 1), end=TODAY)


def _session() -> Session:
    engine = create_engine('sqlite+pysqlite:///:memory:', future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)()


def _seed_account(db: Session) -> None:
    db.add_all(
        [
            Invoice(
                account_id='acct-1',
                invoice_number='INV-001',
                client_name='Acme Corp',
                total=money('1200.00'),
                status=InvoiceStatus.paid,
                paid_at=datetime(2026, 3, 12, 9, 0),
                created_at=datetime(2026, 3, 2, 10, 0),
            ),
            Invoice(
                account_id='acct-1',
                invoice_number='INV-002',
                client_name='Design Agency',
                total=money('300.00'),
                status=InvoiceStatus.sent,
                created_at=datetime(2026, 3, 20, 15, 30),
            ),
            Invoice(
                account_id='acct-1',
                invoice_number='INV-000',
                client_name='Acme Corp',
                total=money('999.00'),
                status=InvoiceStatus.paid,
                created_at=datetime(2026, 2, 27, 10, 0),
            ),
            Invoice(
                account_id='acct-2',
                invoice_number='INV-001',
                client_name='Other Co',
                total=money('50.00'),
                status=InvoiceStatus.paid,
                created_at=datetime(2026, 3, 5, 10, 0),
            ),
        ]
    )
    db.commit()


def test_fetch_scopes_records_to_account_and_window() -> None:
    db = _session()
    _seed_account(db)

    records = fetch_invoice_records(db, 'acct-1', WINDOW)

    assert [row.invoice_number for row in records] == ['INV-002', 'INV-001']
    assert records[1].amount == Decimal('1200.00')
    assert records[1].status == InvoiceStatus.paid


def test_get_analytics_runs_full_pipeline_and_caches() -> None:
    db = _session()
    _seed_account(db)
    cache = AnalyticsCache()
    calls = []

    def fetcher(session: Session, account_id: str, window: AnalyticsWindow):
        calls.append(account_id)
        return fetch_invoice_records(session, account_id, window)

    first = get_analytics(db, cache, 'acct-1', WINDOW, today=TODAY, fetcher=fetcher)
    second = get_analytics(db, cache, 'acct-1', WINDOW, today=TODAY, fetcher=fetcher)

    assert first is second
    assert calls == ['acct-1']
    assert first.source == AnalyticsSource.live
    assert first.overview.total_revenue == Decimal('1200.00')
    assert first.overview.total_invoices == 2
    assert first.overview.outstanding_amount == Decimal('300.00')
    assert len(first.revenue_chart) == WINDOW.days
    assert len(first.revenue_forecast) == get_settings().forecast_periods
    assert first.revenue_forecast[0].period == date(2026, 4, 1)
    assert [row.client_name for row in first.client_analytics] == ['Acme Corp', 'Design Agency']
    assert {row.client_name for row in first.churn_risks} == {'Acme Corp', 'Design Agency'}
    assert [row.period for row in first.seasonal_trends] == ['2026-03']
    assert first.predictions.next_month_revenue == Decimal('1500.00')
    assert first.predictions.confidence == 60
    assert 0 <= first.business_health.overall_score <= 100
    assert first.insights[-1].id == 'follow_up_automation'


def test_empty_account_without_fallback_stays_live() -> None:
    db = _session()

    result = get_analytics(db, AnalyticsCache(), 'nobody', WINDOW, today=TODAY)

    assert result.source == AnalyticsSource.live
    assert result.overview.total_invoices == 0
    assert all(point.revenue == 0 for point in result.revenue_chart)
    assert result.client_analytics == []
    assert result.churn_risks == []


def test_empty_account_uses_demo_records_when_enabled(monkeypatch) -> None:
    monkeypatch.setattr(get_settings(), 'demo_fallback_enabled', True)
    db = _session()

    result = get_analytics(db, AnalyticsCache(), 'nobody', WINDOW, today=TODAY)

    assert result.source == AnalyticsSource.demo
    assert result.overview.total_invoices > 0
    assert len(result.revenue_chart) == WINDOW.days


def test_demo_records_are_deterministic_and_inside_window() -> None:
    first = generate_demo_records(WINDOW, seed=7)
    second = generate_demo_records(WINDOW, seed=7)

    assert first == second
    assert first
    assert all(WINDOW.contains(row.created_on) for row in first)
    assert all(row.amount >= 0 for row in first)
    assert all(row.paid_at is not None for row in first if row.status == InvoiceStatus.paid)


def test_build_analytics_over_demo_records() -> None:
    records = generate_demo_records(WINDOW, seed=11)

    result = build_analytics(
        records,
        WINDOW,
        account_id='demo',
        forecast_periods=6,
        today=TODAY,
        source=AnalyticsSource.demo,
    )

    assert sum(point.invoice_count for point in result.revenue_chart) == len(records)
    assert sum(point.revenue for point in result.revenue_chart) == money(sum(row.amount for row in records))
    assert [row.confidence for row in result.revenue_forecast] == [85, 83, 81, 79, 77, 75]
    assert [row.metric for row in result.growth_projections] == ['Monthly Revenue', 'Client Base']
    assert len(result.insights) <= 5


def test_seed_demo_data_is_idempotent() -> None:
    db = _session()

    inserted = seed_demo_data(db, today=TODAY)

    assert inserted > 0
    assert seed_demo_data(db, today=TODAY) == 0
    records = fetch_invoice_records(db, get_settings().demo_account_id, WINDOW)
    assert records
