"""FastAPI application entry point."""

import logging
import shutil
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI

from quillstack import __version__
from quillstack.api.admin import router as admin_router
from quillstack.api.classify import router as classify_router
from quillstack.api.settings import router as settings_router
from quillstack.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Log resolved configuration at startup for debugging."""
    s = get_settings()
    logger.info(
        "QuillStack starting: data_path=%s, provider=%s, credential=%s",
        s.data_path,
        s.llm_provider,
        "configured" if s.credential_configured else "missing",
    )
    if not s.credential_configured:
        logger.warning("No API key for %s; remote classification disabled", s.llm_provider)
    yield


app = FastAPI(
    title="QuillStack",
    description="Classification and sectioning engine for handwritten note OCR text",
    version=__version__,
    debug=settings.debug,
    lifespan=lifespan,
)

app.include_router(admin_router)
app.include_router(classify_router)
app.include_router(settings_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Return project information."""
    return {
        "name": "QuillStack",
        "version": __version__,
        "description": "Classification and sectioning engine for handwritten note OCR text",
    }


@app.get("/health")
@app.get("/api/v1/health")
async def health() -> dict[str, Any]:
    """Health check endpoint with credential and disk status."""
    s = get_settings()

    checks: dict[str, Any] = {"status": "ok"}
    checks["remote_classification"] = "ok" if s.credential_configured else "no credential"

    # Disk space
    disk_path = s.data_path if s.data_path.exists() else Path(".")
    _, _, free = shutil.disk_usage(str(disk_path))
    free_gb = round(free / (1024**3), 2)
    checks["free_disk_gb"] = free_gb
    if free_gb < 1.0:
        checks["status"] = "warning"
        checks["disk"] = "low"

    return checks
