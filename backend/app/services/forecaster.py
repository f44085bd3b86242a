"""Revenue forecasting and seasonality over the daily revenue series.

The forecast is a deterministic heuristic: an ordinary least-squares trend
line over the series index, scaled by a weekday seasonal factor. Confidence is
a fixed decay, not a statistical interval.

Two seasonal measures live here and use different granularities on purpose:
the forecast's seasonal *factor* is per weekday, while the seasonal *index*
used to classify trends is per calendar month.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from fastapi import HTTPException, status

from app.models.enums import ForecastTrend, PredictionTrend, SeasonalClassification
from app.services.aggregator import TimeSeriesPoint
from app.utils.decimal_math import ZERO, mean, money, pct, safe_pct, safe_ratio


BASE_CONFIDENCE = 85
CONFIDENCE_STEP = 2
MIN_CONFIDENCE = 50
PEAK_INDEX = Decimal("1.2")
VALLEY_INDEX = Decimal("0.8")
GROWTH_WINDOW = 30
CLIENT_GROWTH_WINDOW = 4
NEXT_MONTH_LOOKBACK_DAYS = 30
GROWING_INVOICE_COUNT = 5


@dataclass(frozen=True)
class RevenueForecast:
    period: date
    predicted_revenue: Decimal
    confidence: int
    trend: ForecastTrend
    seasonal_factor: Decimal


@dataclass(frozen=True)
class NextMonthPrediction:
    next_month_revenue: Decimal
    confidence: int
    trend: PredictionTrend


@dataclass(frozen=True)
class SeasonalTrend:
    period: str
    revenue: Decimal
    invoice_count: int
    average_value: Decimal
    seasonal_index: Decimal
    trend: SeasonalClassification


@dataclass(frozen=True)
class GrowthProjection:
    metric: str
    current_value: Decimal
    projected_value: Decimal
    growth_rate: Decimal
    confidence: int
    timeframe: str
    factors: list[str]


def linear_regression(series: list[Decimal]) -> tuple[Decimal, Decimal]:
    """Return (slope, intercept) of revenue against index 0..n-1.

    With fewer than two points the slope is 0 and the intercept is the mean
    of whatever is there (0 for an empty series).
    """
    n = len(series)
    if n == 0:
        return ZERO, ZERO
    if n == 1:
        return ZERO, series[0]
    x_sum = Decimal(sum(range(n)))
    y_sum = sum(series, ZERO)
    xx_sum = Decimal(sum(index * index for index in range(n)))
    xy_sum = sum((Decimal(index) * series[index] for index in range(n)), ZERO)
    denom = Decimal(n) * xx_sum - x_sum * x_sum
    if denom == 0:
        return ZERO, y_sum / Decimal(n)
    slope = (Decimal(n) * xy_sum - x_sum * y_sum) / denom
    intercept = (y_sum - slope * x_sum) / Decimal(n)
    return slope, intercept


def trend_label(slope: Decimal) -> ForecastTrend:
    if slope > 0:
        return ForecastTrend.increasing
    if slope < 0:
        return ForecastTrend.decreasing
    return ForecastTrend.stable


def weekday_factors(series: list[TimeSeriesPoint]) -> list[Decimal]:
    """Seven factors, element k applying to series index k (mod 7)."""
    if not series:
        return [Decimal("1")] * 7
    overall = mean([point.revenue for point in series])
    by_weekday: dict[int, list[Decimal]] = {}
    for point in series:
        by_weekday.setdefault(point.date.weekday(), []).append(point.revenue)

    factors: list[Decimal] = []
    first_weekday = series[0].date.weekday()
    for offset in range(7):
        values = by_weekday.get((first_weekday + offset) % 7)
        if overall == 0 or not values:
            factors.append(Decimal("1"))
        else:
            factors.append(pct(mean(values) / overall))
    return factors


def confidence_for(periods_ahead: int) -> int:
    return max(MIN_CONFIDENCE, BASE_CONFIDENCE - periods_ahead * CONFIDENCE_STEP)


def forecast(series: list[TimeSeriesPoint], periods: int) -> list[RevenueForecast]:
    if periods < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="periods must be >= 1.")
    if not series:
        return []

    slope, intercept = linear_regression([point.revenue for point in series])
    factors = weekday_factors(series)
    trend = trend_label(slope)
    last_day = series[-1].date
    n = len(series)

    rows: list[RevenueForecast] = []
    for step in range(periods):
        index = n + step
        factor = factors[index % 7]
        predicted = (slope * Decimal(index) + intercept) * factor
        rows.append(
            RevenueForecast(
                period=last_day + timedelta(days=step + 1),
                predicted_revenue=money(max(ZERO, predicted)),
                confidence=confidence_for(step),
                trend=trend,
                seasonal_factor=factor,
            )
        )
    return rows


def _classify(seasonal_index: Decimal) -> SeasonalClassification:
    if seasonal_index >= PEAK_INDEX:
        return SeasonalClassification.peak
    if seasonal_index <= VALLEY_INDEX:
        return SeasonalClassification.valley
    if seasonal_index > 1:
        return SeasonalClassification.growing
    return SeasonalClassification.declining


def seasonal_trends(series: list[TimeSeriesPoint]) -> list[SeasonalTrend]:
    if not series:
        return []
    overall = mean([point.revenue for point in series])
    by_month: dict[tuple[int, int], list[TimeSeriesPoint]] = {}
    for point in series:
        by_month.setdefault((point.date.year, point.date.month), []).append(point)

    rows: list[SeasonalTrend] = []
    for (year, month), points in sorted(by_month.items()):
        revenue = money(sum((point.revenue for point in points), ZERO))
        invoice_count = sum(point.invoice_count for point in points)
        seasonal_index = safe_ratio(mean([point.revenue for point in points]), overall, default=Decimal("1"))
        rows.append(
            SeasonalTrend(
                period=f"{year:04d}-{month:02d}",
                revenue=revenue,
                invoice_count=invoice_count,
                average_value=money(revenue / invoice_count) if invoice_count else money(0),
                seasonal_index=seasonal_index,
                trend=_classify(seasonal_index),
            )
        )
    return rows


def coefficient_of_variation(values: list[Decimal]) -> Decimal:
    if len(values) < 2:
        return ZERO
    average = mean(values)
    if average <= 0:
        return ZERO
    variance = sum(((value - average) ** 2 for value in values), ZERO) / Decimal(len(values))
    std = variance.sqrt() if variance > 0 else ZERO
    return std / average


def _growth_confidence(values: list[Decimal]) -> int:
    if len(values) < 6:
        return 60
    return int(max(Decimal(MIN_CONFIDENCE), Decimal("90") - coefficient_of_variation(values) * 100))


def growth_projections(series: list[TimeSeriesPoint], client_count: int) -> list[GrowthProjection]:
    if not series:
        return []
    revenues = [point.revenue for point in series]

    recent = sum(revenues[-GROWTH_WINDOW:], ZERO)
    previous = sum(revenues[-2 * GROWTH_WINDOW:-GROWTH_WINDOW], ZERO) or recent
    revenue_growth = safe_pct(recent - previous, previous)

    recent_short = sum(revenues[-CLIENT_GROWTH_WINDOW:], ZERO)
    previous_short = sum(revenues[-2 * CLIENT_GROWTH_WINDOW:-CLIENT_GROWTH_WINDOW], ZERO)
    client_growth = safe_pct(recent_short - previous_short, previous_short)

    return [
        GrowthProjection(
            metric="Monthly Revenue",
            current_value=money(recent),
            projected_value=money(max(ZERO, recent * (1 + revenue_growth / 100))),
            growth_rate=revenue_growth,
            confidence=_growth_confidence(revenues),
            timeframe="1m",
            factors=["Historical performance", "Seasonal trends", "Client retention"],
        ),
        GrowthProjection(
            metric="Client Base",
            current_value=Decimal(client_count),
            projected_value=Decimal(max(0, round(client_count * (1 + client_growth / 100)))),
            growth_rate=client_growth,
            confidence=75,
            timeframe="3m",
            factors=["Client acquisition rate", "Churn prediction", "Market trends"],
        ),
    ]


def predict_next_month(series: list[TimeSeriesPoint], *, today: date) -> NextMonthPrediction:
    """Run-rate estimate: the last 30 days of invoiced revenue carried forward one month."""
    cutoff = today - timedelta(days=NEXT_MONTH_LOOKBACK_DAYS)
    recent = [point for point in series if cutoff < point.date <= today]
    invoice_count = sum(point.invoice_count for point in recent)
    return NextMonthPrediction(
        next_month_revenue=money(sum((point.revenue for point in recent), ZERO)),
        confidence=min(90, max(60, invoice_count * 10)),
        trend=PredictionTrend.growing if invoice_count > GROWING_INVOICE_COUNT else PredictionTrend.stable,
    )
