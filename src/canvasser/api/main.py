"""
FastAPI Main Application

Canvassing REST API over a single shared workspace.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import exc, text
from sqlalchemy.orm import Session

from config.settings import settings
from src.canvasser import __version__
from src.canvasser.api.dependencies import get_db, get_workspace
from src.canvasser.api.routers import analytics, properties, routes, summary, territories, tracking
from src.canvasser.api.schemas import HealthCheck
from src.canvasser.db.session import create_all_tables, get_db_session
from src.canvasser.exceptions import EmptyNote, InvalidPolygon, InvalidTransition, NotFound
from src.canvasser.utils.logger import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the snapshot table and restore the default workspace on startup."""
    create_all_tables()
    with get_db_session() as session:
        get_workspace().load(session, settings.snapshot_key)
    logger.info("api_started", snapshot_key=settings.snapshot_key, environment=settings.environment)
    yield


# Create FastAPI app
app = FastAPI(
    title="Canvassing API",
    description="Territories, property visit logging, knock routes and day summaries for door-to-door sales",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, error: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(error)})


@app.exception_handler(InvalidPolygon)
@app.exception_handler(EmptyNote)
@app.exception_handler(InvalidTransition)
async def unprocessable_handler(request: Request, error: Exception):
    return JSONResponse(status_code=422, content={"detail": str(error)})


@app.exception_handler(ValueError)
async def bad_request_handler(request: Request, error: ValueError):
    logger.warning("api_bad_request", path=request.url.path, error=str(error))
    return JSONResponse(status_code=400, content={"detail": str(error)})


# Include routers
app.include_router(territories.router)
app.include_router(properties.router)
app.include_router(routes.router)
app.include_router(summary.router)
app.include_router(tracking.router)
app.include_router(analytics.router)


@app.get("/health", response_model=HealthCheck, tags=["health"])
def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
        Health status with database connectivity check
    """
    try:
        db.execute(text("SELECT 1"))
        database_status = "connected"
    except exc.SQLAlchemyError as e:
        database_status = f"error: {str(e)}"

    return HealthCheck(
        status="healthy" if database_status == "connected" else "degraded",
        version=__version__,
        database=database_status,
        timestamp=datetime.now(timezone.utc),
    )


@app.get("/", tags=["root"])
def root():
    """
    Root endpoint.

    Returns:
        API information
    """
    return {
        "name": "Canvassing API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.canvasser.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
