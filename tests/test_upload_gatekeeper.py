"""
Upload Gatekeeper Tests
"""
import pytest

from resumeflow.core.errors import (
    AuthorizationError,
    NotFoundError,
    RateLimitError,
    UploadValidationError,
)
from resumeflow.models.resume import DocumentFormat, ExtractionStatus
from resumeflow.services.rate_limiter import VALIDATE_UPLOAD
from resumeflow.services.upload_gatekeeper import (
    MISMATCH_ERROR,
    SIZE_ERROR,
    TYPE_ERROR,
    UploadDescriptor,
    UploadGatekeeper,
)

from tests.conftest import DOCX_MIME, PDF_MIME, make_docx, make_pdf

MAX_BYTES = 10 * 1024 * 1024


@pytest.fixture
def gatekeeper(blob_store, rate_limiter, resume_store):
    return UploadGatekeeper(blob_store, rate_limiter, resume_store, MAX_BYTES)


def _descriptor(document, size=None, mime=None, key=None):
    return UploadDescriptor(
        file_name=document.file_name,
        size_bytes=document.size_bytes if size is None else size,
        declared_mime_type=mime or document.declared_mime_type,
        storage_key=key or document.storage_key
    )


class TestDeclaredMetadata:

    def test_oversized_file_rejected(self, gatekeeper, stored_resume, blob_store, candidate):
        document = stored_resume(candidate, make_pdf(["Jane"]))

        with pytest.raises(UploadValidationError) as exc_info:
            gatekeeper.validate(candidate, _descriptor(document, size=MAX_BYTES + 1))

        assert exc_info.value.message == SIZE_ERROR
        assert exc_info.value.object_deleted is False
        assert document.storage_key in blob_store.objects

    def test_zero_size_rejected(self, gatekeeper, stored_resume, candidate):
        document = stored_resume(candidate, make_pdf(["Jane"]))
        with pytest.raises(UploadValidationError, match="10MB"):
            gatekeeper.validate(candidate, _descriptor(document, size=0))

    def test_disallowed_mime_rejected(self, gatekeeper, stored_resume, candidate):
        document = stored_resume(candidate, b"hello", file_name="notes.txt", mime_type="text/plain")

        with pytest.raises(UploadValidationError) as exc_info:
            gatekeeper.validate(candidate, _descriptor(document))

        assert exc_info.value.message == TYPE_ERROR

    def test_key_outside_user_folder(self, gatekeeper, stored_resume, candidate, other_candidate):
        document = stored_resume(other_candidate, make_pdf(["Jane"]))

        with pytest.raises(AuthorizationError):
            gatekeeper.validate(candidate, _descriptor(document))

    def test_missing_object(self, gatekeeper, stored_resume, blob_store, candidate):
        document = stored_resume(candidate, make_pdf(["Jane"]))
        blob_store.delete(document.storage_key)

        with pytest.raises(NotFoundError):
            gatekeeper.validate(candidate, _descriptor(document))


class TestContentCheck:

    def test_text_file_posing_as_pdf_is_deleted(self, gatekeeper, stored_resume, blob_store, resume_store, candidate):
        content = b"This is a plain text file pretending to be a PDF!"
        document = stored_resume(candidate, content, file_name="cv.pdf", mime_type=PDF_MIME)

        with pytest.raises(UploadValidationError) as exc_info:
            gatekeeper.validate(candidate, _descriptor(document))

        assert exc_info.value.message == MISMATCH_ERROR
        assert exc_info.value.object_deleted is True
        assert document.storage_key not in blob_store.objects

        record = resume_store.get(document.id)
        assert record.extraction_status == ExtractionStatus.rejected
        assert record.extraction_reason == MISMATCH_ERROR

    def test_pdf_declared_as_docx_is_deleted(self, gatekeeper, stored_resume, blob_store, candidate):
        document = stored_resume(candidate, make_pdf(["Jane"]), file_name="cv.docx", mime_type=DOCX_MIME)

        with pytest.raises(UploadValidationError):
            gatekeeper.validate(candidate, _descriptor(document))

        assert document.storage_key not in blob_store.objects

    def test_failed_validation_is_not_counted(self, gatekeeper, stored_resume, rate_limiter, candidate):
        document = stored_resume(candidate, b"not a pdf at all", mime_type=PDF_MIME)
        with pytest.raises(UploadValidationError):
            gatekeeper.validate(candidate, _descriptor(document))

        assert rate_limiter.count(candidate, VALIDATE_UPLOAD, 60) == 0


class TestSuccessfulValidation:

    def test_pdf(self, gatekeeper, stored_resume, resume_store, rate_limiter, candidate):
        document = stored_resume(candidate, make_pdf(["Jane"]))

        result = gatekeeper.validate(candidate, _descriptor(document))

        assert result.valid is True
        assert result.detected_format == DocumentFormat.pdf
        assert rate_limiter.count(candidate, VALIDATE_UPLOAD, 60) == 1

        record = resume_store.get(document.id)
        assert record.extraction_status == ExtractionStatus.validated
        assert record.detected_format == DocumentFormat.pdf

    def test_docx(self, gatekeeper, stored_resume, candidate):
        document = stored_resume(candidate, make_docx("Jane"), file_name="cv.docx", mime_type=DOCX_MIME)
        assert gatekeeper.validate(candidate, _descriptor(document)).detected_format == DocumentFormat.docx

    def test_revalidation_keeps_status(self, gatekeeper, stored_resume, resume_store, candidate):
        document = stored_resume(candidate, make_pdf(["Jane"]))
        gatekeeper.validate(candidate, _descriptor(document))
        resume_store.set_status(document.id, ExtractionStatus.extracting)

        gatekeeper.validate(candidate, _descriptor(document))

        assert resume_store.get(document.id).extraction_status == ExtractionStatus.extracting

    def test_rate_limit_checked_first(self, gatekeeper, stored_resume, candidate):
        document = stored_resume(candidate, make_pdf(["Jane"]))
        for _ in range(3):
            gatekeeper.validate(candidate, _descriptor(document))

        with pytest.raises(RateLimitError):
            gatekeeper.validate(candidate, _descriptor(document, size=MAX_BYTES + 1))
