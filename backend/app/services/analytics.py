from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.enums import AnalyticsSource
from app.services.aggregator import (
    ActivityItem,
    CategoryBreakdown,
    ClientAnalytic,
    OverviewMetrics,
    TimeSeriesPoint,
    TrendMetric,
    aggregate,
)
from app.services.cache import AnalyticsCache, AnalyticsCacheKey
from app.services.churn import ChurnRiskClient, score_churn_risk
from app.services.demo import generate_demo_records
from app.services.forecaster import (
    GrowthProjection,
    NextMonthPrediction,
    RevenueForecast,
    SeasonalTrend,
    forecast,
    growth_projections,
    predict_next_month,
    seasonal_trends,
)
from app.services.insights import BusinessHealth, PredictiveInsight, compose_insights
from app.services.records import AnalyticsWindow, InvoiceRecord, fetch_invoice_records


logger = logging.getLogger(__name__)

RecordFetcher = Callable[[Session, str, AnalyticsWindow], list[InvoiceRecord]]


@dataclass(frozen=True)
class AnalyticsResult:
    account_id: str
    window: AnalyticsWindow
    source: AnalyticsSource
    generated_at: datetime
    overview: OverviewMetrics
    metrics: list[TrendMetric]
    revenue_chart: list[TimeSeriesPoint]
    client_analytics: list[ClientAnalytic]
    category_breakdown: list[CategoryBreakdown]
    recent_activity: list[ActivityItem]
    revenue_forecast: list[RevenueForecast]
    churn_risks: list[ChurnRiskClient]
    seasonal_trends: list[SeasonalTrend]
    growth_projections: list[GrowthProjection]
    predictions: NextMonthPrediction
    insights: list[PredictiveInsight]
    business_health: BusinessHealth


def build_analytics(
    records: list[InvoiceRecord],
    window: AnalyticsWindow,
    *,
    account_id: str,
    forecast_periods: int,
    today: date | None = None,
    source: AnalyticsSource = AnalyticsSource.live,
) -> AnalyticsResult:
    reference_day = today or date.today()
    aggregated = aggregate(records, window, today=reference_day)
    revenue_forecast = forecast(aggregated.time_series, forecast_periods)
    churn_risks = score_churn_risk(aggregated.client_analytics, today=reference_day)
    bundle = compose_insights(aggregated.overview, revenue_forecast, churn_risks)

    return AnalyticsResult(
        account_id=account_id,
        window=window,
        source=source,
        generated_at=datetime.now(timezone.utc),
        overview=aggregated.overview,
        metrics=aggregated.trend_metrics,
        revenue_chart=aggregated.time_series,
        client_analytics=aggregated.client_analytics,
        category_breakdown=aggregated.category_breakdown,
        recent_activity=aggregated.recent_activity,
        revenue_forecast=revenue_forecast,
        churn_risks=churn_risks,
        seasonal_trends=seasonal_trends(aggregated.time_series),
        growth_projections=growth_projections(aggregated.time_series, len(aggregated.client_analytics)),
        predictions=predict_next_month(aggregated.time_series, today=reference_day),
        insights=bundle.insights,
        business_health=bundle.business_health,
    )


def get_analytics(
    db: Session,
    cache: AnalyticsCache[AnalyticsResult],
    account_id: str,
    window: AnalyticsWindow,
    *,
    today: date | None = None,
    fetcher: RecordFetcher = fetch_invoice_records,
) -> AnalyticsResult:
    settings = get_settings()

    def compute() -> AnalyticsResult:
        records = fetcher(db, account_id, window)
        source = AnalyticsSource.live
        if not records and settings.demo_fallback_enabled:
            logger.info("No invoices for account %s in %s..%s; using demo records", account_id, window.start, window.end)
            records = generate_demo_records(window, seed=settings.demo_seed)
            source = AnalyticsSource.demo
        logger.info(
            "Computing analytics for account %s over %s..%s (%d records)",
            account_id,
            window.start,
            window.end,
            len(records),
        )
        return build_analytics(
            records,
            window,
            account_id=account_id,
            forecast_periods=settings.forecast_periods,
            today=today,
            source=source,
        )

    key = AnalyticsCacheKey(account_id=account_id, start=window.start, end=window.end)
    return cache.get_or_compute(key, compute)
