"""
Resume Routes

POST   /resumes/upload          - Store a resume file (PDF/DOC/DOCX, max 10MB)
POST   /resumes/validate-upload - Verify size, type and magic number of a stored file
POST   /resumes/extract-text    - Extract plain text (PDF, DOCX, OCR fallback)
POST   /resumes/analyze         - ATS scoring of extracted text
GET    /resumes/formats         - Supported formats
GET    /resumes                 - List own resumes
GET    /resumes/{resume_id}     - Get one resume
DELETE /resumes/{resume_id}     - Delete resume and its stored file
"""

import logging
import uuid

from fastapi import APIRouter, Depends, File, UploadFile

from resumeflow.api.deps import (
    get_analysis_service,
    get_blob_store,
    get_extraction_service,
    get_resume_store,
    get_upload_gatekeeper,
)
from resumeflow.core.auth import get_current_user, is_admin
from resumeflow.core.config import Settings, get_settings
from resumeflow.core.errors import PipelineError, UploadValidationError
from resumeflow.models.resume import ResumeDocument
from resumeflow.schemas.schemas import (
    AnalyzeRequest, ExtractTextRequest, ExtractTextResponse, MessageResponse,
    ResumeListResponse, ResumeResponse, UploadResponse, ValidateUploadRequest, ValidateUploadResponse
)
from resumeflow.services.extraction_service import ExtractionService
from resumeflow.services.resume_analysis import ResumeAnalysisService
from resumeflow.services.resume_store import ResumeStore
from resumeflow.services.upload_gatekeeper import (
    SIZE_ERROR, UploadDescriptor, UploadGatekeeper, storage_prefix
)
from resumeflow.utils.file_signatures import get_supported_formats, safe_file_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resumes", tags=["Resumes"])


def to_response(document: ResumeDocument) -> ResumeResponse:
    return ResumeResponse(
        id=document.id,
        file_name=document.file_name,
        size_bytes=document.size_bytes,
        declared_mime_type=document.declared_mime_type,
        storage_key=document.storage_key,
        detected_format=document.detected_format.value if document.detected_format else None,
        extraction_status=document.extraction_status,
        extraction_reason=document.extraction_reason,
        text_length=len(document.text_content or ""),
        ats_score=document.ats_score,
        created_at=document.created_at,
        updated_at=document.updated_at
    )


@router.post("/upload", response_model=UploadResponse, status_code=201)
def upload_resume(
    file: UploadFile = File(..., description="Resume file (PDF, DOC or DOCX)"),
    user: dict = Depends(get_current_user),
    blob_store=Depends(get_blob_store),
    store: ResumeStore = Depends(get_resume_store),
    settings: Settings = Depends(get_settings)
):
    """
    Store an uploaded resume and create its record.

    Nothing about the file is trusted yet - call /resumes/validate-upload next.
    """
    content = file.file.read(settings.max_upload_bytes + 1)
    if not content or len(content) > settings.max_upload_bytes:
        raise UploadValidationError(SIZE_ERROR)

    file_name = file.filename or "resume"
    mime_type = file.content_type or "application/octet-stream"
    storage_key = f"{storage_prefix(user['user_id'])}{uuid.uuid4().hex}-{safe_file_name(file_name)}"

    blob_store.upload(storage_key, content, content_type=mime_type, owner_id=user["user_id"])
    document = store.create(
        owner_id=user["user_id"],
        file_name=file_name,
        size_bytes=len(content),
        declared_mime_type=mime_type,
        storage_key=storage_key
    )
    logger.info("Stored upload %s for user %s (%s bytes)", storage_key, user["user_id"], len(content))

    return UploadResponse(
        id=document.id,
        storage_key=storage_key,
        file_name=file_name,
        size_bytes=len(content),
        mime_type=mime_type,
        extraction_status=document.extraction_status
    )


@router.post("/validate-upload", response_model=ValidateUploadResponse, response_model_exclude_none=True)
def validate_upload(
    request: ValidateUploadRequest,
    user: dict = Depends(get_current_user),
    gatekeeper: UploadGatekeeper = Depends(get_upload_gatekeeper)
):
    """
    Validate a stored upload against its declared metadata.

    On a magic-number mismatch the stored file is deleted.
    """
    try:
        gatekeeper.validate(
            user["user_id"],
            UploadDescriptor(
                file_name=request.file_name,
                size_bytes=request.file_size,
                declared_mime_type=request.mime_type,
                storage_key=request.storage_key
            )
        )
    except PipelineError as e:
        e.extra["valid"] = False
        raise

    return ValidateUploadResponse(valid=True)


@router.post("/extract-text", response_model=ExtractTextResponse, response_model_exclude_none=True)
def extract_text(
    request: ExtractTextRequest,
    user: dict = Depends(get_current_user),
    service: ExtractionService = Depends(get_extraction_service)
):
    """
    Extract text from a validated resume and store it on the record.

    Unsupported documents are a normal 200 answer with `unsupported: true`;
    infrastructure failures are errors.
    """
    outcome = service.extract(user["user_id"], request.document_id, request.storage_key)

    if outcome.is_unsupported:
        return ExtractTextResponse(success=False, unsupported=True, reason=outcome.reason)

    return ExtractTextResponse(success=True, text_length=len(outcome.text), has_text=True)


@router.post("/analyze")
def analyze_resume(
    request: AnalyzeRequest,
    user: dict = Depends(get_current_user),
    service: ResumeAnalysisService = Depends(get_analysis_service)
):
    """
    Score a resume with the AI collaborator.

    Send either `textContent` directly or a `resumeId` whose extracted text
    should be used. Results for a resume are stored on it.
    """
    return service.analyze(
        user["user_id"],
        resume_id=request.resume_id,
        text_content=request.text_content,
        target_role=request.target_role
    )


@router.get("/formats")
def resume_formats(settings: Settings = Depends(get_settings)):
    """Get supported resume file formats."""
    return get_supported_formats(settings.max_upload_bytes)


@router.get("", response_model=ResumeListResponse)
def list_resumes(user: dict = Depends(get_current_user), store: ResumeStore = Depends(get_resume_store)):
    """List the caller's resumes, newest first."""
    documents = store.list_for_owner(user["user_id"])
    return ResumeListResponse(resumes=[to_response(d) for d in documents], total=len(documents))


@router.get("/{resume_id}", response_model=ResumeResponse)
def get_resume(resume_id: int, user: dict = Depends(get_current_user), store: ResumeStore = Depends(get_resume_store)):
    document = store.get_owned(resume_id, user["user_id"], allow_admin=is_admin(user))
    return to_response(document)


@router.delete("/{resume_id}", response_model=MessageResponse)
def delete_resume(
    resume_id: int,
    user: dict = Depends(get_current_user),
    store: ResumeStore = Depends(get_resume_store),
    blob_store=Depends(get_blob_store)
):
    """Delete a resume (owner or admin). The stored file goes with it."""
    document = store.get_owned(resume_id, user["user_id"], allow_admin=is_admin(user))
    blob_store.delete(document.storage_key)
    store.delete(resume_id)
    logger.info("Deleted resume %s (%s) by user %s", resume_id, document.storage_key, user["user_id"])
    return MessageResponse(message="Resume deleted")
