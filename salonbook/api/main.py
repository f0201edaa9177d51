"""salonbook FastAPI application.

Start with:
    uvicorn salonbook.api.main:app --reload --host 0.0.0.0 --port 8000
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from salonbook.api.errors import install_error_handlers
from salonbook.config import load_booking_config, load_evolution_config
from salonbook.core.logger import configure
from salonbook.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure()

    await ensure_database_exists()
    engine = build_engine()
    app.state.session_factory = build_session_factory(engine)
    await init_db()

    app.state.booking_config = load_booking_config()
    app.state.evolution_config = load_evolution_config()
    evolution = app.state.evolution_config
    logger.info(
        "API: WhatsApp notifications %s, reminders %s",
        "on" if evolution.can_notify else "off",
        "on" if evolution.can_notify and evolution.reminder_enabled else "off",
    )
    if not app.state.admin_api_key:
        logger.warning("API: ADMIN_API_KEY not set; admin endpoints are unreachable")

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await close_engine()
    logger.info("API: engine disposed")


app = FastAPI(
    title="salonbook API",
    version="1.0.0",
    description="Bookings, treatment plans, pricing and partner earnings for a salon/clinic.",
    lifespan=lifespan,
)

# Per-client rate limit from API_RATE_LIMIT (default 60/minute)
_rate_limit = os.environ.get("API_RATE_LIMIT", "60/minute")
limiter = Limiter(key_func=get_remote_address, default_limits=[_rate_limit])
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

_allowed_origins = [
    o.strip()
    for o in os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# X-Api-Key equal to ADMIN_API_KEY grants admin; X-User-Id names the caller
app.state.admin_api_key = os.environ.get("ADMIN_API_KEY", "").strip() or None

install_error_handlers(app)

# ── Routers ───────────────────────────────────────────────────────
from salonbook.api.routers import appointments, partners, plans, pricing, sales, tasks  # noqa: E402

app.include_router(plans.router, prefix="/api/v1")
app.include_router(appointments.router, prefix="/api/v1")
app.include_router(pricing.router, prefix="/api/v1")
app.include_router(partners.router, prefix="/api/v1")
app.include_router(sales.router, prefix="/api/v1")
app.include_router(tasks.router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
