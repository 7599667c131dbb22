import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routers import router as api_router
from core.config import AppSettings
from core.db import init_db
from core.errors import StoreError, ValidationError

logger = logging.getLogger(__name__)


def setup_basic_logging(level: str = "INFO") -> None:
    """Setup basic stdout logging unless the host (e.g. uvicorn) already did."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        ))
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


def create_app(settings: AppSettings = None) -> FastAPI:
    """
    Create and configure the FastAPI application.
    All portal routes live under /api.
    """
    # Load environment variables from project root .env before settings are instantiated
    try:
        project_root = Path(__file__).resolve().parent.parent
        load_dotenv(dotenv_path=project_root / ".env")
    except Exception:
        # Ignore .env read errors (permission or missing); rely on process env instead
        pass

    settings = settings or AppSettings()
    setup_basic_logging(settings.log_level)

    app = FastAPI(title="Student Portal API", version="0.1.0")
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        logger.info(f"Rejected {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc), "field": exc.field},
        )

    @app.exception_handler(StoreError)
    async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
        logger.exception(f"Store failure on {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    app.include_router(api_router, prefix="/api")

    @app.get("/")
    def root():
        return {
            "message": "Student Portal API",
            "version": "0.1.0",
            "docs": "/docs",
            "health": "/api/health",
        }

    @app.on_event("startup")
    def _startup() -> None:
        init_db()

    return app


app = create_app()


if __name__ == "__main__":
    import os
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
