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
from app.models.invoice import Invoice

__all__ = [
    "AnalyticsSource",
    "ForecastTrend",
    "ImpactLevel",
    "InsightType",
    "Invoice",
    "InvoiceStatus",
    "MetricFormat",
    "PaymentHistory",
    "PredictionTrend",
    "RiskLevel",
    "SeasonalClassification",
    "TrendDirection",
]
