"""Market Academy – FastAPI application."""
# Load .env before any app code that might read config
from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.database import Base, engine
from app.exceptions import AccountError
# Import models so Base.metadata has all tables before create_all (schema source of truth)
from app.models import User, PendingSignup, AuditLog  # noqa: F401
from app.routers import auth

log = logging.getLogger("uvicorn.error")

settings = get_settings()
app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)


@app.exception_handler(AccountError)
def account_error_handler(request: Request, exc: AccountError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
def startup():
    if settings.sms_dry_run:
        print("[SMS] Dry run enabled - OTP codes are logged, not sent")
    elif settings.sms_api_key:
        print(f"[SMS] App using sender={settings.sms_sender} route={settings.sms_route} template={settings.sms_template_id}")
    else:
        print("[SMS] Not configured - signup and login OTP requests will fail; set SMS_API_KEY in .env and restart")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        log.warning("Database startup failed (tables skipped). Check DATABASE_URL and network. Error: %s", e)

    if settings.pending_cleanup_enabled:
        from apscheduler.schedulers.background import BackgroundScheduler
        from app.services.pending_cleanup import run_pending_signup_cleanup_job
        scheduler = BackgroundScheduler()
        scheduler.add_job(
            run_pending_signup_cleanup_job,
            "interval",
            minutes=settings.pending_cleanup_interval_minutes,
        )
        scheduler.start()
        app.state.scheduler = scheduler


@app.on_event("shutdown")
def shutdown():
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.shutdown(wait=False)


@app.get("/")
def root():
    return {"app": settings.app_name, "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
