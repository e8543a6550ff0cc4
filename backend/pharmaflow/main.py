"""
PharmaFlow POS Backend.

ARCHITECTURE:
- FastAPI backend: register, inventory, purchasing and back-office logic
- SQLite DB (any SQLAlchemy URL): source of truth for all state
- Register frontend talks to this API with a JWT (header or httpOnly cookie)

RULES ENFORCED HERE:
- Every route checks the employee's role permission
- Sales and returns are never dated before the last recorded transaction
- Stock is kept in units and never goes below zero
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from pharmaflow.api.routes import (
    assistant, auth, customers, employees, inventory, purchases, reports, returns, sales, shifts, suppliers,
)
from pharmaflow.core.config import settings
from pharmaflow.core.rate_limiter import RateLimitMiddleware
from pharmaflow.db.init_db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
    1. Create tables
    2. Apply pending data migrations
    3. Seed the default admin employee on a fresh install
    """
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(
    title="PharmaFlow POS API",
    description="Pharmacy point of sale: register, inventory, purchasing, shifts and reports.",
    version="0.1.0",
    lifespan=lifespan,
)

# SECURITY: Trust only configured hosts
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

# SECURITY: Restrict CORS to specific methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,
    expose_headers=["Content-Type", "Content-Disposition"],
)

# SECURITY: Rate limiting against brute force on the login endpoint
app.add_middleware(RateLimitMiddleware)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if settings.ENVIRONMENT == "production":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
app.include_router(sales.router, prefix="/sales", tags=["sales"])
app.include_router(returns.router, prefix="/returns", tags=["returns"])
app.include_router(purchases.router, prefix="/purchases", tags=["purchases"])
app.include_router(suppliers.router, prefix="/suppliers", tags=["suppliers"])
app.include_router(customers.router, prefix="/customers", tags=["customers"])
app.include_router(shifts.router, prefix="/shifts", tags=["shifts"])
app.include_router(employees.router, prefix="/employees", tags=["employees"])
app.include_router(reports.router, prefix="/reports", tags=["reports"])
app.include_router(assistant.router, prefix="/assistant", tags=["assistant"])


@app.get("/health")
def health():
    return {"status": "ok"}
