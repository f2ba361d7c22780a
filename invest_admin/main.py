"""
Invest Admin Console — FastAPI application entry point.

Configures logging, middleware, and registers all API routers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from invest_admin.api import (
    auth,
    dashboard,
    kyc,
    notifications,
    payments,
    plans,
    platform_settings,
    tasks,
    transactions,
    users,
    withdrawals,
)
from invest_admin.config import settings
from invest_admin.redis_client import get_redis, redis_available
from invest_admin.services.platform_client import close_platform_client

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    from invest_admin.redis_client import redis

    yield

    # Shutdown: close connections
    await close_platform_client()
    await redis.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Admin console service for the investment platform.",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["Dashboard"])
app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(withdrawals.router, prefix="/api/v1/withdrawals", tags=["Withdrawals"])
app.include_router(kyc.router, prefix="/api/v1/kyc", tags=["KYC"])
app.include_router(payments.router, prefix="/api/v1/payments", tags=["Payments"])
app.include_router(plans.router, prefix="/api/v1/plans", tags=["Plans"])
app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["Tasks"])
app.include_router(transactions.router, prefix="/api/v1/transactions", tags=["Transactions"])
app.include_router(notifications.router, prefix="/api/v1/notifications", tags=["Notifications"])
app.include_router(platform_settings.router, prefix="/api/v1/settings", tags=["Settings"])


@app.get("/health")
async def health_check(redis=Depends(get_redis)):
    """Health check endpoint for load balancers and monitoring."""
    redis_ok = await redis_available(redis)
    return {
        "status": "healthy" if redis_ok else "degraded",
        "service": settings.APP_NAME,
        "version": "0.1.0",
        "redis": redis_ok,
    }
