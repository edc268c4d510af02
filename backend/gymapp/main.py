"""
FastAPI app entrypoint.

Gym backend: accounts, trainer availability, session booking, subscriptions and payments,
chat (REST + WebSocket), workout plans, gym owner client management and AI coaching
suggestions.
"""
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from gymapp.api.routes import (
    ai,
    auth,
    bookings,
    chat,
    gym_owner,
    payments,
    realtime,
    subscriptions,
    trainers,
    workouts,
)
from gymapp.config import settings
from gymapp.core.constants import SUBSCRIPTION_EXPIRY_JOB_ID
from gymapp.core.errors import MSG_INTERNAL, STATUS_BAD_REQUEST, STATUS_INTERNAL_ERROR, GymAppError
from gymapp.scheduler.subscription_expiry_job import run_subscription_expiry_job

if settings.openai_api_key:
    os.environ["OPENAI_API_KEY"] = settings.openai_api_key

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = None
    if settings.scheduler_enabled:
        scheduler = BackgroundScheduler()
        scheduler.add_job(
            run_subscription_expiry_job,
            "interval",
            minutes=settings.subscription_expiry_interval_minutes,
            id=SUBSCRIPTION_EXPIRY_JOB_ID,
        )
        scheduler.start()
        logger.info(
            "Subscription expiry job scheduled every %s minutes", settings.subscription_expiry_interval_minutes
        )
    app.state.scheduler = scheduler
    logger.info("Backend ready")
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)


app = FastAPI(title="Gym Backend", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the production frontend
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_cors_origins.extend(settings.cors_origin_list())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GymAppError)
async def gym_app_error_handler(request: Request, exc: GymAppError):
    if exc.status_code >= STATUS_INTERNAL_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid input.")
    detail = f"{field}: {message}" if field else message
    return JSONResponse(status_code=STATUS_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=STATUS_INTERNAL_ERROR, content={"detail": MSG_INTERNAL})


app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(trainers.router, tags=["trainers"])
app.include_router(bookings.router, tags=["bookings"])
app.include_router(chat.router, prefix="/chat", tags=["chat"])
app.include_router(realtime.router, tags=["realtime"])
app.include_router(subscriptions.router, prefix="/subscriptions", tags=["subscriptions"])
app.include_router(payments.router, prefix="/payments", tags=["payments"])
app.include_router(ai.router, prefix="/ai", tags=["ai"])
app.include_router(workouts.router, prefix="/workouts", tags=["workouts"])
app.include_router(gym_owner.router, prefix="/gym-owner", tags=["gym owner"])


@app.get("/", include_in_schema=False)
def root():
    return {"message": "Gym API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
