import enum


class InvoiceStatus(str, enum.Enum):
    draft = "draft"
    sent = "sent"
    paid = "paid"
    overdue = "overdue"


class TrendDirection(str, enum.Enum):
    up = "up"
    down = "down"
    neutral = "neutral"


class MetricFormat(str, enum.Enum):
    currency = "currency"
    number = "number"
    percentage = "percentage"


class PaymentHistory(str, enum.Enum):
    excellent = "excellent"
    good = "good"
    fair = "fair"
    poor = "poor"


class ForecastTrend(str, enum.Enum):
    increasing = "increasing"
    decreasing = "decreasing"
    stable = "stable"


class RiskLevel(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class SeasonalClassification(str, enum.Enum):
    peak = "peak"
    valley = "valley"
    growing = "growing"
    declining = "declining"


class InsightType(str, enum.Enum):
    opportunity = "opportunity"
    risk = "risk"
    trend = "trend"
    recommendation = "recommendation"


class ImpactLevel(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class AnalyticsSource(str, enum.Enum):
    live = "live"
    demo = "demo"


class PredictionTrend(str, enum.Enum):
    growing = "growing"
    stable = "stable"
