from collections import defaultdict, deque
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import api_router
from app.core.config import get_settings
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.services.cache import AnalyticsCache
from app.services.seed import seed_demo_data


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

settings = get_settings()
logger = logging.getLogger("quickbill.api")


def _load_demo_invoices() -> None:
    with SessionLocal() as db:
        try:
            inserted = seed_demo_data(db)
        except Exception:
            db.rollback()
            logger.exception("Demo invoice seed failed; continuing without it.")
            return
    if inserted:
        logger.info("Seeded %d demo invoices for %s.", inserted, settings.demo_account_id)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_schema:
        Base.metadata.create_all(bind=engine)
    if settings.seed_demo_data:
        _load_demo_invoices()
    logger.info(
        "QuickBill analytics ready (cache ttl %ss, window %s days).",
        settings.analytics_cache_ttl_seconds,
        settings.default_window_days,
    )
    yield
    app.state.analytics_cache.clear_cache()
    engine.dispose()
    logger.info("QuickBill analytics shutdown complete.")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)
app.state.analytics_cache = AnalyticsCache(ttl_seconds=settings.analytics_cache_ttl_seconds)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

MAX_TRACKED_CLIENTS = 10_000
_request_buckets: dict[str, deque[float]] = defaultdict(deque)


def _rate_limit_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _prune_idle_buckets(now: float) -> None:
    idle = [
        key
        for key, bucket in _request_buckets.items()
        if not bucket or now - bucket[-1] > settings.rate_limit_window_seconds
    ]
    for key in idle:
        del _request_buckets[key]


def _over_limit(key: str, now: float) -> bool:
    if len(_request_buckets) > MAX_TRACKED_CLIENTS:
        _prune_idle_buckets(now)
    bucket = _request_buckets[key]
    while bucket and now - bucket[0] > settings.rate_limit_window_seconds:
        bucket.popleft()
    if len(bucket) >= settings.rate_limit_requests:
        return True
    bucket.append(now)
    return False


@app.middleware("http")
async def request_log_and_rate_limit(request: Request, call_next):
    started = time.monotonic()
    key = _rate_limit_key(request)
    if _over_limit(key, time.time()):
        logger.warning("Rate limit hit for %s on %s", key, request.url.path)
        return JSONResponse(
            status_code=429,
            content={"detail": "Too many analytics requests. Retry shortly."},
        )

    try:
        response = await call_next(request)
    except Exception as exc:  # pragma: no cover
        logger.exception("Unhandled error for %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    elapsed_ms = (time.monotonic() - started) * 1000
    response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.2f}"
    logger.info(
        "%s %s -> %s %.2fms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


@app.get("/healthz")
def healthz() -> dict:
    return {
        "ok": True,
        "cached_results": len(app.state.analytics_cache),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/", include_in_schema=False)
def root() -> dict[str, str]:
    return {
        "service": settings.app_name,
        "health": "/healthz",
        "analytics": f"{settings.api_prefix}/analytics?account_id=<id>",
        "docs": "/docs",
    }


app.include_router(api_router, prefix=settings.api_prefix)
