"""
Alien Food Push Backend - FastAPI Application

Serves the VAPID public key, stores browser push subscriptions and lets an
administrator send notifications.

Usage:
    uvicorn alienfood.backend.main:app --host 0.0.0.0 --port 5000 --reload

    Or run directly:
    python -m alienfood.backend.main
"""

from contextlib import asynccontextmanager
from datetime import datetime

# Load .env file before anything else
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from alienfood import get_connection
from alienfood.backend.routes import api_router
from alienfood.config import load_config
from alienfood.logging_config import get_logger, setup_logging
from alienfood.push.vapid import has_configured_keys


setup_logging()
logger = get_logger(__name__)

# Track startup time for uptime calculation
startup_time: datetime | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    global startup_time

    startup_time = datetime.now()

    # Create the schema up front so the first request does not pay for it
    conn = get_connection()
    conn.close()

    if not has_configured_keys():
        logger.warning(
            "vapid_keys_not_configured",
            hint="set VAPID_PUBLIC_KEY and VAPID_PRIVATE_KEY; generated keys do not survive restarts",
        )
    logger.info("backend_started")

    yield

    logger.info("backend_stopped")


app = FastAPI(
    title="Alien Food Push API",
    description="Web Push subscription and notification API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=load_config()["cors_origins"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["health"])
async def health_check():
    """Liveness probe."""
    return {
        "status": "ok",
        "vapid_configured": has_configured_keys(),
        "uptime_seconds": int((datetime.now() - startup_time).total_seconds()) if startup_time else 0,
    }


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("alienfood.backend.main:app", host="0.0.0.0", port=5000, reload=True, log_level="info")
