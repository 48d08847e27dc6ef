import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from maji.api.v1 import alerts, auth, orders, payments, reports, users, vendors, zones
from maji.core.config import settings
from maji.core.database import engine
from maji.core.errors import MajiError
from maji.core.redis import close_redis
from maji.middleware.metrics import PrometheusMiddleware, metrics_endpoint
from maji.middleware.rate_limit import RateLimitMiddleware

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting Maji API...")

    yield

    logger.info("Shutting down, closing Redis and database connections")
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="Maji API",
    version="1.0.0",
    description="Water supply alerts, marketplace and infrastructure reporting",
    lifespan=lifespan,
)


@app.exception_handler(MajiError)
async def maji_error_handler(request: Request, exc: MajiError) -> JSONResponse:
    """Map application errors to the standard error body."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.to_dict()},
    )


# Prometheus Metrics Middleware (must be first to capture all requests)
app.add_middleware(PrometheusMiddleware)

# Rate Limiting Middleware (must be before CORS)
app.add_middleware(
    RateLimitMiddleware,
    limit=settings.RATE_LIMIT_MAX,
    window=settings.RATE_LIMIT_WINDOW_SECONDS,
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include API routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
app.include_router(zones.router, prefix="/api/v1/zones", tags=["zones"])
app.include_router(vendors.router, prefix="/api/v1/vendors", tags=["vendors"])
app.include_router(orders.router, prefix="/api/v1/orders", tags=["orders"])
app.include_router(payments.router, prefix="/api/v1/payments", tags=["payments"])
app.include_router(alerts.router, prefix="/api/v1/alerts", tags=["alerts"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Prometheus metrics endpoint
app.add_route("/metrics", metrics_endpoint)
