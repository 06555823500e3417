"""
FastAPI application entry point.

Sets up the app, lifespan (DB connect/disconnect), CORS, logging, error
handlers, and includes API routers.

Why async: All I/O (MongoDB via Motor) is non-blocking so one process can
handle many concurrent requests. bcrypt and SMTP are blocking; they run in a
thread pool (asyncio.to_thread) so they don't block the event loop.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import auth, health, users
from app.config import get_settings
from app.database import close_mongo_connection, connect_to_mongo
from app.errors import register_exception_handlers

# Configure logging - single place for log format and level
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def check_configuration() -> None:
    """Log a warning for settings that will make requests fail later."""
    settings = get_settings()
    # Without a secret every token endpoint answers 503
    secret = settings.jwt_secret or ""
    if not secret:
        logger.warning("JWT_SECRET is not set. Set it in .env; token endpoints will return 503.")
    elif len(secret) < 32 or "secret" in secret.lower() or "your-" in secret.lower():
        logger.warning("JWT_SECRET looks like a placeholder. Use a long random string in production.")
    if not (settings.email_user and settings.email_sender):
        logger.warning("EMAIL_USER is not set. Sign-up will fail until SMTP is configured.")
    else:
        logger.info("OTP email via %s:%s as %s", settings.email_host, settings.email_port, settings.email_sender)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context: runs on startup and shutdown.
    We use it to connect to MongoDB at start and disconnect at end.
    """
    # Startup
    await connect_to_mongo()
    check_configuration()
    yield
    # Shutdown
    await close_mongo_connection()


def create_application() -> FastAPI:
    """Factory for the FastAPI app. Keeps main.py clean and testable."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Email OTP sign-up, password sign-in and user management.",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS - allow browser clients to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Restrict in production to your frontend origin
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(users.router, prefix="/users", tags=["users"])
    app.include_router(health.router, prefix="/health", tags=["health"])

    return app


app = create_application()
