from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from app.models.enums import ForecastTrend, ImpactLevel, InsightType, RiskLevel
from app.services.aggregator import OverviewMetrics
from app.services.churn import ChurnRiskClient
from app.services.forecaster import RevenueForecast
from app.utils.decimal_math import ZERO, money


IMPACT_WEIGHT = {ImpactLevel.low: 1, ImpactLevel.medium: 2, ImpactLevel.high: 3}
MAX_INSIGHTS = 5
REVENUE_REFERENCE = Decimal("10000")
LOW_COLLECTION_RATE = Decimal("50")
AT_RISK_LEVELS = {RiskLevel.high, RiskLevel.critical}


@dataclass(frozen=True)
class PredictiveInsight:
    id: str
    type: InsightType
    title: str
    description: str
    impact: ImpactLevel
    confidence: int
    actionable: bool
    suggested_actions: list[str] = field(default_factory=list)
    estimated_value: Decimal | None = None


@dataclass(frozen=True)
class BusinessHealth:
    overall_score: int
    risk_factors: list[str]
    opportunities: list[str]
    recommendations: list[str]


@dataclass(frozen=True)
class InsightBundle:
    insights: list[PredictiveInsight]
    business_health: BusinessHealth


def health_score(overview: OverviewMetrics) -> int:
    collection_points = (overview.collection_rate / Decimal("100")) * Decimal("50")
    revenue_scale = min(overview.total_revenue / REVENUE_REFERENCE, Decimal("1"))
    score = collection_points + revenue_scale * Decimal("30") + Decimal("20")
    clamped = min(Decimal("100"), max(ZERO, score))
    return int(clamped.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def assess_business_health(
    overview: OverviewMetrics,
    forecast: list[RevenueForecast],
    churn_risks: list[ChurnRiskClient],
) -> BusinessHealth:
    score = health_score(overview)
    at_risk = [row for row in churn_risks if row.risk_level in AT_RISK_LEVELS]

    risk_factors: list[str] = []
    if overview.total_invoices and overview.collection_rate < LOW_COLLECTION_RATE:
        risk_factors.append("Low collection rate")
    if overview.total_revenue < REVENUE_REFERENCE:
        risk_factors.append("Limited revenue")
    if at_risk:
        risk_factors.append(f"{len(at_risk)} client(s) at high churn risk")
    if forecast and forecast[0].trend == ForecastTrend.decreasing:
        risk_factors.append("Revenue trend is declining")

    opportunities = ["Expand client base", "Increase recurring revenue"]
    if forecast and forecast[0].trend == ForecastTrend.increasing:
        opportunities.insert(0, "Revenue is trending upward")

    recommendations: list[str] = []
    if overview.outstanding_amount > 0:
        recommendations.append("Follow up on outstanding invoices")
    if at_risk:
        recommendations.append("Focus on client retention")
    recommendations.append("Optimize pricing")

    return BusinessHealth(
        overall_score=score,
        risk_factors=risk_factors,
        opportunities=opportunities,
        recommendations=recommendations,
    )


def _ranked(items: list[PredictiveInsight]) -> list[PredictiveInsight]:
    ordered = sorted(items, key=lambda row: IMPACT_WEIGHT[row.impact], reverse=True)
    return ordered[:MAX_INSIGHTS]


def build_insights(
    forecast: list[RevenueForecast],
    churn_risks: list[ChurnRiskClient],
) -> list[PredictiveInsight]:
    rows: list[PredictiveInsight] = []

    if forecast and forecast[0].trend == ForecastTrend.increasing:
        rows.append(
            PredictiveInsight(
                id="revenue_growth",
                type=InsightType.opportunity,
                title="Revenue Growth Opportunity",
                description="Predicted revenue increase over the coming periods.",
                impact=ImpactLevel.high,
                confidence=forecast[0].confidence,
                actionable=False,
                suggested_actions=["Plan for increased capacity", "Invest in business tools"],
                estimated_value=forecast[0].predicted_revenue,
            )
        )

    at_risk = [row for row in churn_risks if row.risk_level in AT_RISK_LEVELS]
    if at_risk:
        rows.append(
            PredictiveInsight(
                id="churn_risk",
                type=InsightType.risk,
                title=f"{len(at_risk)} Client{'s' if len(at_risk) > 1 else ''} at Risk",
                description="High-risk clients identified - review relationships.",
                impact=ImpactLevel.medium,
                confidence=90,
                actionable=True,
                suggested_actions=["Schedule client check-ins", "Review service quality"],
                estimated_value=money(sum((row.total_revenue for row in at_risk), ZERO)),
            )
        )

    rows.append(
        PredictiveInsight(
            id="follow_up_automation",
            type=InsightType.recommendation,
            title="Optimize Invoice Follow-up",
            description="Implement automated follow-up for overdue invoices.",
            impact=ImpactLevel.medium,
            confidence=75,
            actionable=False,
            suggested_actions=["Enable payment reminders", "Offer online payment links"],
        )
    )
    return _ranked(rows)


def compose_insights(
    overview: OverviewMetrics,
    forecast: list[RevenueForecast],
    churn_risks: list[ChurnRiskClient],
) -> InsightBundle:
    return InsightBundle(
        insights=build_insights(forecast, churn_risks),
        business_health=assess_business_health(overview, forecast, churn_risks),
    )
