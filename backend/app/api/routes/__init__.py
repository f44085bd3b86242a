from fastapi import APIRouter

from app.api.routes import analytics, exports, health, invoices


api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(invoices.router)
api_router.include_router(analytics.router)
api_router.include_router(exports.router)
