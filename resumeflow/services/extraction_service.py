"""
Extraction Service - the extract-text operation end to end.

    rate limit -> ownership -> storage key check -> status check
    -> extracting -> download -> dispatch -> store outcome

Everything runs inside the request; there is no queue. The two blocking
points are the storage download and (for scanned PDFs) the OCR call.
"""

import logging

from resumeflow.core.errors import (
    AuthorizationError,
    PipelineError,
    TransientExternalError,
    UploadValidationError,
)
from resumeflow.models.resume import EXTRACTABLE_STATUSES, ExtractionOutcome, ExtractionStatus
from resumeflow.services.format_dispatcher import FormatDispatcher
from resumeflow.services.rate_limiter import EXTRACT_TEXT, RateLimiter
from resumeflow.services.resume_store import ExtractionResultStore, ResumeStore

logger = logging.getLogger(__name__)


class ExtractionService:

    def __init__(
        self,
        blob_store,
        rate_limiter: RateLimiter,
        resume_store: ResumeStore,
        dispatcher: FormatDispatcher
    ):
        self.blob_store = blob_store
        self.rate_limiter = rate_limiter
        self.resume_store = resume_store
        self.result_store = ExtractionResultStore(resume_store)
        self.dispatcher = dispatcher

    def extract(self, user_id: int, resume_id: int, storage_key: str) -> ExtractionOutcome:
        """
        Extract and persist the text of one resume.

        Returns:
            ExtractionOutcome - text_extracted or unsupported

        Raises:
            RateLimitError, NotFoundError, AuthorizationError,
            UploadValidationError (document not validated yet),
            TransientExternalError (storage failed; resume left as extraction_failed)
        """
        self.rate_limiter.hit(user_id, EXTRACT_TEXT)

        document = self.resume_store.get_owned(resume_id, user_id)
        if document.storage_key != storage_key:
            raise AuthorizationError("Storage key does not match this resume")
        if document.extraction_status not in EXTRACTABLE_STATUSES:
            raise UploadValidationError(
                f"Resume cannot be extracted while {document.extraction_status.value}; validate the upload first"
            )

        logger.info("Extracting text from resume %s, file: %s", resume_id, storage_key)
        self.resume_store.set_status(resume_id, ExtractionStatus.extracting)

        try:
            content = self.blob_store.download(storage_key)
            outcome = self.dispatcher.dispatch(content, document.file_name)
        except PipelineError as e:
            # storage failure, or the object vanished after validation
            self.result_store.mark_failed(resume_id, user_id, e.message)
            raise
        except Exception as e:
            logger.exception("Text extraction error for resume %s", resume_id)
            self.result_store.mark_failed(resume_id, user_id, str(e))
            raise TransientExternalError("Text extraction failed") from e

        self.result_store.save(resume_id, user_id, outcome)
        return outcome
