from collections.abc import Generator
from datetime import date

from fastapi import Query, Request
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.session import SessionLocal
from app.services.analytics import AnalyticsResult
from app.services.cache import AnalyticsCache
from app.services.records import AnalyticsWindow, default_window


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_analytics_cache(request: Request) -> AnalyticsCache[AnalyticsResult]:
    return request.app.state.analytics_cache


def get_window(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
) -> AnalyticsWindow:
    if start is None and end is None:
        return default_window(get_settings().default_window_days)
    fallback = default_window(get_settings().default_window_days, today=end)
    return AnalyticsWindow(start=start or fallback.start, end=end or date.today())
