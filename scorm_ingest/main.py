"""SCORM ingest API.

Mounts the health and SCORM routers under ``/api/v1`` and renders every
error as ``{success, error, timestamp, path}``.
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
import subprocess
from datetime import datetime
from pathlib import Path

from scorm_ingest.exceptions import ScormPackageError
from scorm_ingest.routers import health, scorm

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

APP_NAME = "SCORM Ingest API"
VERSION = "1.0.0"
DESCRIPTION = """
Imports SCORM 1.2 / 2004 packages and records learner runtime data.

* **Import / Validate**: parse imsmanifest.xml, extract launchable SCOs
* **Launch / Tracking**: store CMI data as completion, success, score and time
"""

PROJECT_ROOT = Path(__file__).resolve().parent.parent
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:3001"
).split(",")
AUTO_MIGRATE = os.getenv("AUTO_MIGRATE", "false").lower() in {"1", "true", "yes"}

app = FastAPI(
    title=APP_NAME,
    description=DESCRIPTION,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


def _error_response(request, status_code: int, error) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "timestamp": datetime.utcnow().isoformat(),
            "path": str(request.url),
        },
    )


@app.exception_handler(HTTPException)
async def http_error(request, exc):
    return _error_response(request, exc.status_code, exc.detail)


@app.exception_handler(ScormPackageError)
async def package_error(request, exc):
    """Unreadable packages are a client error"""
    logger.warning("Rejected SCORM package: %s", exc)
    return _error_response(request, 400, str(exc))


@app.exception_handler(Exception)
async def unexpected_error(request, exc):
    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
    return _error_response(request, 500, "Internal server error")


app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(scorm.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
async def root():
    return {
        "name": APP_NAME,
        "version": VERSION,
        "status": "running",
        "environment": os.getenv("ENVIRONMENT", "development"),
        "timestamp": datetime.utcnow().isoformat(),
        "docs": "/docs",
        "health": "/api/v1/health"
    }


def _run_migrations() -> None:
    """Bring the SCORM tables up to date with ``alembic upgrade head``."""
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        logger.error("AUTO_MIGRATE is set but the alembic executable was not found")
        return
    if result.returncode != 0:
        logger.error(
            "SCORM table migration failed (exit %s): %s\n%s",
            result.returncode, result.stdout, result.stderr,
        )
    else:
        logger.info("SCORM tables migrated to head")


@app.on_event("startup")
async def startup_event():
    logger.info(
        "Starting %s v%s (environment=%s, cors=%s)",
        APP_NAME, VERSION, os.getenv("ENVIRONMENT", "development"), CORS_ORIGINS,
    )
    if AUTO_MIGRATE:
        _run_migrations()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down %s", APP_NAME)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "scorm_ingest.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8000)),
        reload=True,
        log_level="info"
    )
