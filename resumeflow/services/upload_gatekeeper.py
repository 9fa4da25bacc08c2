"""
Upload Gatekeeper - decides whether a just-uploaded file can be trusted.

Order of checks:
1. rate limit (check only, nothing recorded yet)
2. declared size     - rejected before any download
3. declared MIME     - rejected before any download
4. storage namespace - the key must live under the caller's folder
5. content           - download, compare the magic number with the declared
                       type; on mismatch the stored object is DELETED

Only a fully successful validation is recorded against the rate limit.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from resumeflow.core.errors import AuthorizationError, UploadValidationError
from resumeflow.models.resume import DocumentFormat, ExtractionStatus
from resumeflow.services.rate_limiter import VALIDATE_UPLOAD, RateLimiter
from resumeflow.services.resume_store import ResumeStore
from resumeflow.utils.file_signatures import format_for_mime_type, hex_signature, signature_matches

logger = logging.getLogger(__name__)

SIZE_ERROR = "File size must be less than 10MB"
TYPE_ERROR = "Only PDF and Word documents are allowed"
MISMATCH_ERROR = "File type does not match content. File removed for security."


@dataclass
class UploadDescriptor:
    file_name: str
    size_bytes: Optional[int]
    declared_mime_type: Optional[str]
    storage_key: str


@dataclass
class ValidationResult:
    valid: bool
    detected_format: Optional[DocumentFormat] = None


def storage_prefix(user_id: int) -> str:
    return f"{user_id}/"


class UploadGatekeeper:

    def __init__(self, blob_store, rate_limiter: RateLimiter, resume_store: ResumeStore, max_upload_bytes: int):
        self.blob_store = blob_store
        self.rate_limiter = rate_limiter
        self.resume_store = resume_store
        self.max_upload_bytes = max_upload_bytes

    def validate(self, user_id: int, upload: UploadDescriptor) -> ValidationResult:
        """
        Validate an uploaded object.

        Raises:
            RateLimitError: validation quota exhausted
            UploadValidationError: size / type / signature check failed
            AuthorizationError: storage key outside the caller's folder
            NotFoundError: nothing stored under the key
            TransientExternalError: storage failure
        """
        self.rate_limiter.check(user_id, VALIDATE_UPLOAD)

        if not upload.size_bytes or upload.size_bytes <= 0 or upload.size_bytes > self.max_upload_bytes:
            logger.warning("File size validation failed: %s bytes", upload.size_bytes)
            raise UploadValidationError(SIZE_ERROR)

        declared = format_for_mime_type(upload.declared_mime_type)
        if declared is None:
            logger.warning("MIME type validation failed: %s", upload.declared_mime_type)
            raise UploadValidationError(TYPE_ERROR)

        if not upload.storage_key.startswith(storage_prefix(user_id)):
            raise AuthorizationError("Storage key does not belong to this user")

        content = self.blob_store.download(upload.storage_key)

        if not signature_matches(content, declared) or len(content) > self.max_upload_bytes:
            logger.warning(
                "File signature mismatch for %s. Expected %s, got signature: %s (%s bytes)",
                upload.file_name, upload.declared_mime_type, hex_signature(content), len(content)
            )
            self.blob_store.delete(upload.storage_key)
            self._mark(upload.storage_key, user_id, ExtractionStatus.rejected, reason=MISMATCH_ERROR)
            raise UploadValidationError(MISMATCH_ERROR, object_deleted=True)

        self.rate_limiter.record(user_id, VALIDATE_UPLOAD)
        self._mark(upload.storage_key, user_id, ExtractionStatus.validated, detected_format=declared)

        logger.info(
            "File validation successful: %s (%s bytes, %s)",
            upload.file_name, upload.size_bytes, upload.declared_mime_type
        )
        return ValidationResult(valid=True, detected_format=declared)

    def _mark(self, storage_key: str, user_id: int, status: ExtractionStatus, **kwargs) -> None:
        """Move the record that owns this object, if one exists and the move is legal."""
        document = self.resume_store.get_by_storage_key(storage_key)
        if document is None or document.owner_id != user_id:
            return
        if document.extraction_status != ExtractionStatus.uploaded:
            # already validated earlier - re-validation does not reset the pipeline
            return
        self.resume_store.set_status(document.id, status, **kwargs)
