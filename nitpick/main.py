"""
Main FastAPI application entry point.
Submission review API.
"""

import logging
import time
from contextlib import asynccontextmanager

import sqlalchemy as sa
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from nitpick.api import api_router
from nitpick.config import get_settings
from nitpick.database import engine, init_db
from nitpick.exceptions import ConflictError, ValidationError
from nitpick.logging_config import configure_logging
from nitpick.middleware.rate_limiter import limiter, rate_limit_exceeded_handler

settings = get_settings()

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Verifies the database connection on startup, then creates any missing
    tables with init_db(). Existing tables are left alone; use
    'alembic upgrade head' for schema changes.
    """
    max_retries = 5
    for i in range(max_retries):
        try:
            with engine.connect() as conn:
                conn.execute(sa.text("SELECT 1"))
            logger.info("Database connection verified successfully")
            init_db()
            logger.info("Database tables initialized")
            break
        except sa.exc.OperationalError as e:
            if i < max_retries - 1:
                logger.warning(f"Database connection failed (attempt {i+1}/{max_retries}): {e}")
                time.sleep(2)
            else:
                logger.error(f"Failed to connect to database after {max_retries} attempts: {e}")
    yield


app = FastAPI(
    title=settings.app_name,
    description="""
    Code review for exercise solutions.

    Features:
    - Submit iterations of a solution to a track's problems
    - Like, mute, and view submissions
    - Pending, aging, and trending submission lists for reviewers
    """,
    version="1.0.0",
    lifespan=lifespan,
)

cors_origins = ["*"] if settings.debug else []

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Configure rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "validation_error", "field": exc.field, "message": str(exc)},
    )


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "conflict", "message": str(exc)},
    )


# Include API routes
app.include_router(api_router)


@app.get("/")
async def root():
    """Root endpoint - basic health check."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "status": "healthy",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import os
    import uvicorn
    port = int(os.getenv("PORT", "8080"))
    uvicorn.run(
        "nitpick.main:app",
        host="0.0.0.0",
        port=port,
        reload=settings.debug,
    )
