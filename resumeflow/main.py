"""
Resume Ingestion Service - Main Application

FastAPI backend with:
- PostgreSQL for resume records and rate-limit events
- MongoDB GridFS for uploaded resume files
- PyPDF2 / python-docx text extraction with OCR.space fallback
- DeepSeek AI for ATS scoring
- JWT authentication

Run: uvicorn resumeflow.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resumeflow import __version__
from resumeflow.api.routes import api_router
from resumeflow.core.config import get_settings
from resumeflow.core.errors import PipelineError
from resumeflow.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the relational schema on startup."""
    settings = get_settings()
    if settings.auto_create_schema:
        from resumeflow.db.postgres import get_engine
        from resumeflow.db.schema import create_schema
        try:
            create_schema(get_engine())
            logger.info("Database schema ready")
        except Exception as e:
            logger.warning("Schema initialization failed: %s", e)
    yield


async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Resume Ingestion Service",
        description="""
        Upload, validation and text extraction for candidate resumes.

        ## Pipeline
        - **Upload**: store the file, record it as `uploaded`
        - **Validate**: size, declared type and magic-number check (mismatches are deleted)
        - **Extract**: PDF / DOCX text with OCR fallback for scanned PDFs
        - **Analyze**: ATS scoring of the extracted text

        AI-assisted endpoints share per-user sliding-window rate limits.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # CORS middleware (allow all for development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PipelineError, pipeline_error_handler)

    # Include API routes
    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["Health"])
    def health_check():
        """Detailed health check."""
        from resumeflow.db.postgres import test_postgres_connection
        from resumeflow.db.storage import test_mongo_connection

        return {
            "status": "healthy",
            "version": __version__,
            "postgres": "connected" if test_postgres_connection() else "disconnected",
            "storage": "connected" if test_mongo_connection() else "disconnected",
            "ocr": "configured" if settings.ocr_configured else "not configured"
        }

    return app


app = create_app()
