"""EventLens web application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eventlens.core.config import settings
from eventlens.core.database import create_db_and_tables
from eventlens.core.errors import AppError, ExternalServiceError
from eventlens.core.scheduler import shutdown_scheduler, start_scheduler
from eventlens.dependencies import get_face_registry
from eventlens.routes import events, invites, notifications, photos, users

# Configure logging
log_dir = Path.home() / ".logs" / "eventlens"
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting EventLens application")
    create_db_and_tables()
    try:
        get_face_registry().ensure_collection()
    except ExternalServiceError as e:
        logger.error(f"Face collection unavailable, photo tagging will fail: {e}")
    start_scheduler()
    yield
    # Shutdown
    shutdown_scheduler()
    logger.info("EventLens application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Event photo sharing with automatic face tagging and invitations",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render service errors as JSON with their mapped status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


# Include routers
app.include_router(users.router)
app.include_router(events.router)
app.include_router(invites.router)
app.include_router(photos.router)
app.include_router(notifications.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
