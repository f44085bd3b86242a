from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi import HTTPException

from app.models.enums import ForecastTrend, PredictionTrend, SeasonalClassification
from app.services.aggregator import TimeSeriesPoint
from app.services.forecaster import (
    confidence_for,
    forecast,
    growth_projections,
    linear_regression,
    predict_next_month,
    seasonal_trends,
    weekday_factors,
)


def _series(revenues: list[str], start: date = date(2026, 3, 2), invoice_count: int = 1) -> list[TimeSeriesPoint]:
    return [
        TimeSeriesPoint(
            date=start + timedelta(days=offset),
            revenue=Decimal(value),
            invoice_count=invoice_count,
            paid_count=invoice_count,
            pending_count=0,
            overdue_count=0,
        )
        for offset, value in enumerate(revenues)
    ]


def test_confidence_decays_and_floors_at_fifty() -> None:
    rows = forecast(_series(['100', '120', '140']), 25)

    confidences = [row.confidence for row in rows]
    assert confidences[0] == 85
    assert confidences[1] == 83
    assert all(later <= earlier for earlier, later in zip(confidences, confidences[1:]))
    assert min(confidences) == 50
    assert confidence_for(17) == 51
    assert confidence_for(18) == 50


def test_forecast_periods_follow_last_series_day() -> None:
    series = _series(['10', '20', '30'])

    rows = forecast(series, 3)

    assert [row.period for row in rows] == [date(2026, 3, 5), date(2026, 3, 6), date(2026, 3, 7)]
    assert all(row.trend == ForecastTrend.increasing for row in rows)


def test_declining_series_never_predicts_negative_revenue() -> None:
    rows = forecast(_series(['900', '600', '300', '0']), 12)

    assert all(row.trend == ForecastTrend.decreasing for row in rows)
    assert all(row.predicted_revenue >= 0 for row in rows)


def test_flat_series_is_stable_with_unit_factors() -> None:
    rows = forecast(_series(['100'] * 14), 5)

    assert all(row.trend == ForecastTrend.stable for row in rows)
    assert all(row.seasonal_factor == Decimal('1') for row in rows)
    assert all(row.predicted_revenue == Decimal('100.00') for row in rows)


def test_single_point_series_projects_its_value() -> None:
    rows = forecast(_series(['250']), 2)

    assert [row.predicted_revenue for row in rows] == [Decimal('250.00'), Decimal('250.00')]
    assert rows[0].trend == ForecastTrend.stable


def test_empty_series_and_invalid_periods() -> None:
    assert forecast([], 6) == []
    with pytest.raises(HTTPException) as exc:
        forecast(_series(['1']), 0)
    assert exc.value.status_code == 400


def test_linear_regression_recovers_exact_line() -> None:
    slope, intercept = linear_regression([Decimal('5'), Decimal('7'), Decimal('9'), Decimal('11')])

    assert slope == Decimal('2')
    assert intercept == Decimal('5')


def test_weekday_factors_default_to_one_without_revenue() -> None:
    assert weekday_factors(_series(['0'] * 10)) == [Decimal('1')] * 7
    assert weekday_factors([]) == [Decimal('1')] * 7


def test_seasonal_trends_classify_months() -> None:
    series = _series(['200', '200', '50', '50'], start=date(2026, 1, 30), invoice_count=2)

    rows = seasonal_trends(series)

    assert [row.period for row in rows] == ['2026-01', '2026-02']
    assert rows[0].trend == SeasonalClassification.peak
    assert rows[0].seasonal_index == Decimal('1.6')
    assert rows[0].invoice_count == 4
    assert rows[0].average_value == Decimal('100.00')
    assert rows[1].trend == SeasonalClassification.valley


def test_growth_projections_for_flat_history() -> None:
    rows = growth_projections(_series(['100'] * 8), client_count=3)

    revenue, clients = rows
    assert revenue.metric == 'Monthly Revenue'
    assert revenue.current_value == Decimal('800.00')
    assert revenue.growth_rate == 0
    assert revenue.projected_value == Decimal('800.00')
    assert clients.metric == 'Client Base'
    assert clients.projected_value == Decimal('3')
    assert clients.timeframe == '3m'
    assert growth_projections([], client_count=0) == []


def test_weekday_factor_follows_calendar_weekday() -> None:
    start = date(2026, 3, 4)
    revenues = ['300' if (start + timedelta(days=offset)).weekday() == 0 else '100' for offset in range(14)]

    rows = forecast(_series(revenues, start=start), 7)

    assert start.weekday() == 2
    assert sorted(row.period.weekday() for row in rows) == list(range(7))
    for row in rows:
        if row.period.weekday() == 0:
            assert row.seasonal_factor > 1
        else:
            assert row.seasonal_factor < 1
    monday = next(row for row in rows if row.period.weekday() == 0)
    assert monday.predicted_revenue == max(row.predicted_revenue for row in rows)


def test_next_month_prediction_uses_last_thirty_days() -> None:
    series = _series(['100'] * 40, start=date(2026, 2, 1))
    today = series[-1].date

    busy = predict_next_month(series, today=today)

    assert busy.next_month_revenue == Decimal('3000.00')
    assert busy.confidence == 90
    assert busy.trend == PredictionTrend.growing


def test_next_month_prediction_for_sparse_history() -> None:
    series = _series(['0'] * 28, start=date(2026, 3, 1), invoice_count=0) + _series(['250', '125'], start=date(2026, 3, 29))

    quiet = predict_next_month(series, today=date(2026, 3, 30))

    assert quiet.next_month_revenue == Decimal('375.00')
    assert quiet.confidence == 60
    assert quiet.trend == PredictionTrend.stable
