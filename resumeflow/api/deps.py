"""
Request dependencies.

Every handler gets its collaborators from here, built per request. Tests
swap any of them with `app.dependency_overrides`.
"""

from typing import Iterator, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from resumeflow.core.config import Settings, get_settings
from resumeflow.db.postgres import get_db
from resumeflow.db.storage import GridFSBlobStore, get_mongo_db
from resumeflow.services.extraction_service import ExtractionService
from resumeflow.services.format_dispatcher import FormatDispatcher
from resumeflow.services.ocr_client import OcrSpaceClient
from resumeflow.services.ocr_fallback import OcrFallback
from resumeflow.services.rate_limiter import Clock, RateLimiter, utc_now
from resumeflow.services.resume_analysis import ResumeAnalysisService
from resumeflow.services.resume_store import ResumeStore
from resumeflow.services.scoring_client import ScoringClient
from resumeflow.services.upload_gatekeeper import UploadGatekeeper


def get_clock() -> Clock:
    return utc_now


def get_blob_store(settings: Settings = Depends(get_settings)) -> GridFSBlobStore:
    return GridFSBlobStore(get_mongo_db(settings), bucket=settings.storage_bucket)


def get_ocr_client(settings: Settings = Depends(get_settings)) -> Iterator[Optional[OcrSpaceClient]]:
    client = OcrSpaceClient.from_settings(settings)
    try:
        yield client
    finally:
        if client is not None:
            client.close()


def get_scoring_client(settings: Settings = Depends(get_settings)) -> Optional[ScoringClient]:
    return ScoringClient.from_settings(settings)


def get_rate_limiter(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> RateLimiter:
    return RateLimiter(db, clock=clock)


def get_resume_store(db: Session = Depends(get_db)) -> ResumeStore:
    return ResumeStore(db)


def get_upload_gatekeeper(
    blob_store=Depends(get_blob_store),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    resume_store: ResumeStore = Depends(get_resume_store),
    settings: Settings = Depends(get_settings)
) -> UploadGatekeeper:
    return UploadGatekeeper(blob_store, rate_limiter, resume_store, settings.max_upload_bytes)


def get_extraction_service(
    blob_store=Depends(get_blob_store),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    resume_store: ResumeStore = Depends(get_resume_store),
    ocr_client: Optional[OcrSpaceClient] = Depends(get_ocr_client),
    settings: Settings = Depends(get_settings)
) -> ExtractionService:
    dispatcher = FormatDispatcher(
        OcrFallback(ocr_client, max_chars=settings.max_extracted_chars),
        max_chars=settings.max_extracted_chars
    )
    return ExtractionService(blob_store, rate_limiter, resume_store, dispatcher)


def get_analysis_service(
    scoring_client: Optional[ScoringClient] = Depends(get_scoring_client),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    resume_store: ResumeStore = Depends(get_resume_store)
) -> ResumeAnalysisService:
    return ResumeAnalysisService(scoring_client, rate_limiter, resume_store)
