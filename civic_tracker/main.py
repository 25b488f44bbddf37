"""
Application entry point.

Run locally:
    uvicorn civic_tracker.main:app --reload --port 8080

API docs available at:
    http://localhost:8080/docs   (Swagger UI)
    http://localhost:8080/redoc  (ReDoc)
"""
import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from civic_tracker.config import Settings, get_settings
from civic_tracker.database import get_db
from civic_tracker.core.dependencies import get_sms_gateway
from civic_tracker.core.logging_config import configure_logging
from civic_tracker.core.rate_limiter import limiter
from civic_tracker.routers import auth, issues, uploads
from civic_tracker.services.sms_service import SmsGateway
from civic_tracker.services.upload_service import ensure_upload_dir

logger = logging.getLogger(__name__)


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Civic Tracker API",
        description=(
            "Citizens sign in with a phone OTP, report civic issues with photo "
            "evidence, and follow each issue's status history."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── Rate Limiter ──────────────────────────────────────────────────────────
    # Attach limiter to app state (required by slowapi)
    # Register the 429 handler so exceeded limits return proper JSON
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # ── CORS ──────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(issues.router, prefix="/issues", tags=["Issues"])
    app.include_router(uploads.router, tags=["Uploads"])

    # Uploaded photos, served read-only
    app.mount("/uploads", StaticFiles(directory=str(ensure_upload_dir(settings))), name="uploads")

    # ── Health Check ──────────────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    def health_check(
        db: Session = Depends(get_db),
        gateway: SmsGateway = Depends(get_sms_gateway),
    ):
        """
        Returns 200 while the process is up. "db" reports whether the
        database answered a trivial query.
        """
        try:
            db.execute(text("SELECT 1"))
            db_state = "up"
        except SQLAlchemyError as e:
            logger.warning(f"Health check: database unreachable: {e}")
            db_state = "down"
        return {"ok": True, "db": db_state, "local_echo": gateway.local_echo}

    logger.info(f"Civic Tracker started (SMS local echo: {'ON' if get_sms_gateway().local_echo else 'OFF'})")
    return app


app = create_app()
