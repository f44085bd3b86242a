from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from app.models.enums import (
    AnalyticsSource,
    ForecastTrend,
    ImpactLevel,
    InsightType,
    InvoiceStatus,
    MetricFormat,
    PaymentHistory,
    PredictionTrend,
    RiskLevel,
    SeasonalClassification,
    TrendDirection,
)
from app.schemas.common import ORMModel


class WindowOut(ORMModel):
    start: date
    end: date


class OverviewOut(ORMModel):
    total_revenue: Decimal
    total_invoices: int
    average_invoice_value: Decimal
    collection_rate: Decimal
    outstanding_amount: Decimal
    monthly_recurring: Decimal


class TrendMetricOut(ORMModel):
    id: str
    name: str
    value: Decimal
    previous_value: Decimal
    change: Decimal
    change_percent: Decimal
    trend: TrendDirection
    format: MetricFormat


class TimeSeriesPointOut(ORMModel):
    date: date
    revenue: Decimal
    invoice_count: int
    paid_count: int
    pending_count: int
    overdue_count: int


class ClientAnalyticOut(ORMModel):
    client_id: str
    client_name: str
    total_revenue: Decimal
    invoice_count: int
    average_invoice_value: Decimal
    last_invoice_date: date
    payment_history: PaymentHistory
    days_to_pay_average: Decimal
    average_payment_delay_days: Decimal
    average_invoice_gap_days: Decimal | None = None


class CategoryBreakdownOut(ORMModel):
    category: str
    revenue: Decimal
    percentage: Decimal
    invoice_count: int
    color: str


class ActivityItemOut(ORMModel):
    id: str
    type: str
    title: str
    description: str
    amount: Decimal
    timestamp: datetime
    status: InvoiceStatus
    client_name: str


class RevenueForecastOut(ORMModel):
    period: date
    predicted_revenue: Decimal
    confidence: int
    trend: ForecastTrend
    seasonal_factor: Decimal


class ChurnRiskClientOut(ORMModel):
    client_id: str
    client_name: str
    risk_score: Decimal
    risk_level: RiskLevel
    last_invoice_date: date
    average_payment_delay: Decimal
    total_revenue: Decimal
    recommended_actions: list[str]


class SeasonalTrendOut(ORMModel):
    period: str
    revenue: Decimal
    invoice_count: int
    average_value: Decimal
    seasonal_index: Decimal
    trend: SeasonalClassification


class GrowthProjectionOut(ORMModel):
    metric: str
    current_value: Decimal
    projected_value: Decimal
    growth_rate: Decimal
    confidence: int
    timeframe: Literal["1m", "3m", "6m", "1y"]
    factors: list[str]


class NextMonthPredictionOut(ORMModel):
    next_month_revenue: Decimal
    confidence: int
    trend: PredictionTrend


class PredictiveInsightOut(ORMModel):
    id: str
    type: InsightType
    title: str
    description: str
    impact: ImpactLevel
    confidence: int
    actionable: bool
    suggested_actions: list[str]
    estimated_value: Decimal | None = None


class BusinessHealthOut(ORMModel):
    overall_score: int
    risk_factors: list[str]
    opportunities: list[str]
    recommendations: list[str]


class AnalyticsResponse(ORMModel):
    account_id: str
    window: WindowOut
    source: AnalyticsSource
    generated_at: datetime
    overview: OverviewOut
    metrics: list[TrendMetricOut]
    revenue_chart: list[TimeSeriesPointOut]
    client_analytics: list[ClientAnalyticOut]
    category_breakdown: list[CategoryBreakdownOut]
    recent_activity: list[ActivityItemOut]
    revenue_forecast: list[RevenueForecastOut]
    churn_risks: list[ChurnRiskClientOut]
    seasonal_trends: list[SeasonalTrendOut]
    growth_projections: list[GrowthProjectionOut]
    predictions: NextMonthPredictionOut
    insights: list[PredictiveInsightOut]
    business_health: BusinessHealthOut


class ForecastResponse(ORMModel):
    account_id: str
    method: str
    explanation: str
    points: list[RevenueForecastOut]
    next_month: NextMonthPredictionOut
    seasonal_trends: list[SeasonalTrendOut]
    growth_projections: list[GrowthProjectionOut]


class ChurnResponse(ORMModel):
    account_id: str
    items: list[ChurnRiskClientOut]


class InsightsResponse(ORMModel):
    account_id: str
    items: list[PredictiveInsightOut]
    business_health: BusinessHealthOut
