"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .config import get_settings
from . import __version__

logging.basicConfig(
    level=logging.DEBUG if get_settings().debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the effective limits on startup."""
    settings = get_settings()
    logger.info(
        f"Label Verification API {__version__} ready "
        f"(target {settings.target_time_ms}ms/label, batch limit {settings.max_batch_size})"
    )
    yield
    logger.info("Label Verification API stopped")


def create_app() -> FastAPI:
    """Build the API with CORS and the versioned router."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
Compares label data extracted from a photograph against its COLA
application and returns `approved`, `rejected` or `needs_review`.

- `/verify` checks one label (parsed record or raw extraction reply)
- `/verify/batch` checks a JSON list of labels
- `/verify/batch/csv` checks a CSV of applications plus a JSON file of extraction replies

Batch endpoints return CSV with `?format=csv`.
        """,
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def root():
        return {"message": settings.app_name, "version": __version__, "docs": "/docs"}

    return app


app = create_app()


def run(host: str = "0.0.0.0", port: int = 8000):
    """Serve the API with uvicorn."""
    uvicorn.run("label_verifier.main:app", host=host, port=port, reload=get_settings().debug)


if __name__ == "__main__":
    run()
