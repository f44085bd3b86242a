from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_analytics_cache, get_db, get_window
from app.schemas.analytics import (
    AnalyticsResponse,
    ChurnResponse,
    ForecastResponse,
    InsightsResponse,
    SeasonalTrendOut,
)
from app.schemas.common import MessageResponse
from app.services.analytics import AnalyticsResult, get_analytics
from app.services.cache import AnalyticsCache
from app.services.records import AnalyticsWindow


router = APIRouter(tags=["analytics"])


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics_overview(
    account_id: str = Query(..., min_length=1),
    window: AnalyticsWindow = Depends(get_window),
    db: Session = Depends(get_db),
    cache: AnalyticsCache[AnalyticsResult] = Depends(get_analytics_cache),
) -> AnalyticsResponse:
    result = get_analytics(db, cache, account_id, window)
    return AnalyticsResponse.model_validate(result)


@router.get("/analytics/forecast", response_model=ForecastResponse)
def get_revenue_forecast(
    account_id: str = Query(..., min_length=1),
    window: AnalyticsWindow = Depends(get_window),
    db: Session = Depends(get_db),
    cache: AnalyticsCache[AnalyticsResult] = Depends(get_analytics_cache),
) -> ForecastResponse:
    result = get_analytics(db, cache, account_id, window)
    return ForecastResponse.model_validate(
        {
            "account_id": account_id,
            "method": "linear_regression + weekday_seasonality",
            "explanation": (
                "Daily revenue is projected along a least-squares trend line and scaled by a weekday "
                "seasonal factor. Confidence starts at 85 and drops 2 points per period, floored at 50."
            ),
            "points": result.revenue_forecast,
            "next_month": result.predictions,
            "seasonal_trends": result.seasonal_trends,
            "growth_projections": result.growth_projections,
        }
    )


@router.get("/analytics/churn", response_model=ChurnResponse)
def get_churn_risks(
    account_id: str = Query(..., min_length=1),
    window: AnalyticsWindow = Depends(get_window),
    db: Session = Depends(get_db),
    cache: AnalyticsCache[AnalyticsResult] = Depends(get_analytics_cache),
) -> ChurnResponse:
    result = get_analytics(db, cache, account_id, window)
    return ChurnResponse.model_validate({"account_id": account_id, "items": result.churn_risks})


@router.get("/analytics/seasonal", response_model=list[SeasonalTrendOut])
def get_seasonal_trends(
    account_id: str = Query(..., min_length=1),
    window: AnalyticsWindow = Depends(get_window),
    db: Session = Depends(get_db),
    cache: AnalyticsCache[AnalyticsResult] = Depends(get_analytics_cache),
) -> list[SeasonalTrendOut]:
    result = get_analytics(db, cache, account_id, window)
    return [SeasonalTrendOut.model_validate(row) for row in result.seasonal_trends]


@router.get("/analytics/insights", response_model=InsightsResponse)
def get_insights(
    account_id: str = Query(..., min_length=1),
    window: AnalyticsWindow = Depends(get_window),
    db: Session = Depends(get_db),
    cache: AnalyticsCache[AnalyticsResult] = Depends(get_analytics_cache),
) -> InsightsResponse:
    result = get_analytics(db, cache, account_id, window)
    return InsightsResponse.model_validate(
        {
            "account_id": account_id,
            "items": result.insights,
            "business_health": result.business_health,
        }
    )


@router.post("/analytics/cache/clear", response_model=MessageResponse)
def clear_analytics_cache(
    cache: AnalyticsCache[AnalyticsResult] = Depends(get_analytics_cache),
) -> MessageResponse:
    cleared = len(cache)
    cache.clear_cache()
    return MessageResponse(message=f"Cleared {cleared} cached analytics result(s).")
