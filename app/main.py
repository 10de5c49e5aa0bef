# app/main.py
"""
FastAPI application entry point.
Includes CORS, request timing, error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import (
    auth, events, qr_sessions, registrations, citizen_profiles,
    settings as settings_router, users, exports, stats, health,
)
from app.database import create_tables
from app.config import settings
from app.services.errors import FoodBankError
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Food Bank Registration API",
    description="Distribution event registration, QR sessions and pickup check-in.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (registration site + staff dashboard) ──────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Domain Error Handler ─────────────────────────────────────────────────────
@app.exception_handler(FoodBankError)
async def foodbank_error_handler(request: Request, exc: FoodBankError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.code} — {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(auth.router,             prefix="/api/v1", tags=["Auth"])
app.include_router(events.router,           prefix="/api/v1", tags=["Events"])
app.include_router(qr_sessions.router,      prefix="/api/v1", tags=["QR Sessions"])
app.include_router(registrations.router,    prefix="/api/v1", tags=["Registrations"])
app.include_router(citizen_profiles.router, prefix="/api/v1", tags=["Citizen Profiles"])
app.include_router(settings_router.router,  prefix="/api/v1", tags=["Settings"])
app.include_router(users.router,            prefix="/api/v1", tags=["Users"])
app.include_router(exports.router,          prefix="/api/v1", tags=["Exports"])
app.include_router(stats.router,            prefix="/api/v1", tags=["Stats"])
app.include_router(health.router,           prefix="/api/v1", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("Food Bank Registration API starting up...")
    create_tables()
    logger.info("Database tables ready")
    logger.info(f"Public site: {settings.BASE_URL}")
    logger.info(f"SMS confirmations: {'enabled' if settings.SMS_ENABLED else 'disabled'}")
    logger.info(f"Listening on http://{settings.HOST}:{settings.PORT} — API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Food Bank Registration API shutting down...")
