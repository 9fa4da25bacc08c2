"""
Format Dispatcher Tests
"""
from resumeflow.models.resume import ExtractionStatus
from resumeflow.services.format_dispatcher import (
    EMPTY_DOCX_REASON,
    EMPTY_PDF_REASON,
    LEGACY_DOC_REASON,
    UNKNOWN_FORMAT_REASON,
    FormatDispatcher,
)
from resumeflow.services.ocr_client import OcrError
from resumeflow.services.ocr_fallback import OcrFallback

from tests.conftest import make_docx, make_pdf


class StubOcrClient:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def recognize(self, content, file_name, mime_type="application/pdf"):
        self.calls.append(file_name)
        if self.error:
            raise self.error
        return self.text


def _dispatcher(ocr_client=None):
    return FormatDispatcher(OcrFallback(ocr_client))


class TestPdfDispatch:

    def test_text_pdf(self):
        ocr = StubOcrClient("should not be used")
        outcome = _dispatcher(ocr).dispatch(make_pdf(["Jane Doe Data Analyst"]), "cv.pdf")

        assert outcome.status == ExtractionStatus.text_extracted
        assert "Jane Doe Data Analyst" in outcome.text
        assert outcome.used_ocr is False
        assert ocr.calls == []

    def test_scanned_pdf_uses_ocr(self):
        ocr = StubOcrClient("Scanned Resume Text")
        outcome = _dispatcher(ocr).dispatch(make_pdf([""]), "scan.pdf")

        assert outcome.status == ExtractionStatus.text_extracted
        assert outcome.text == "Scanned Resume Text"
        assert outcome.used_ocr is True
        assert ocr.calls == ["scan.pdf"]

    def test_corrupt_pdf_uses_ocr(self):
        ocr = StubOcrClient("Recovered")
        outcome = _dispatcher(ocr).dispatch(b"%PDF-1.4\nbroken bytes", "broken.pdf")

        assert outcome.status == ExtractionStatus.text_extracted
        assert outcome.text == "Recovered"

    def test_scanned_pdf_without_ocr_is_unsupported(self):
        outcome = _dispatcher(None).dispatch(make_pdf([""]), "scan.pdf")

        assert outcome.status == ExtractionStatus.unsupported
        assert outcome.reason == EMPTY_PDF_REASON
        assert outcome.text == ""

    def test_ocr_failure_is_unsupported(self):
        ocr = StubOcrClient(error=OcrError("quota exceeded"))
        outcome = _dispatcher(ocr).dispatch(make_pdf([""]), "scan.pdf")

        assert outcome.is_unsupported
        assert outcome.used_ocr is True

    def test_ocr_returning_blank_is_unsupported(self):
        outcome = _dispatcher(StubOcrClient("   \n ")).dispatch(make_pdf([""]), "scan.pdf")
        assert outcome.is_unsupported


class TestWordDispatch:

    def test_docx(self):
        outcome = _dispatcher().dispatch(make_docx("Jane Doe", "Backend Engineer"), "cv.docx")

        assert outcome.status == ExtractionStatus.text_extracted
        assert outcome.text == "Jane Doe Backend Engineer"

    def test_empty_docx_is_unsupported(self):
        outcome = _dispatcher().dispatch(make_docx(), "empty.docx")

        assert outcome.is_unsupported
        assert outcome.reason == EMPTY_DOCX_REASON

    def test_broken_docx_is_unsupported(self):
        outcome = _dispatcher().dispatch(b"PK\x03\x04" + b"\x00" * 40, "broken.docx")
        assert outcome.reason == EMPTY_DOCX_REASON

    def test_legacy_doc_is_unsupported(self):
        ocr = StubOcrClient("never")
        outcome = _dispatcher(ocr).dispatch(b"\xd0\xcf\x11\xe0" + b"\x00" * 100, "old.doc")

        assert outcome.is_unsupported
        assert outcome.reason == LEGACY_DOC_REASON
        assert ocr.calls == []


class TestContentSniffing:

    def test_name_is_ignored(self):
        outcome = _dispatcher().dispatch(b"\xd0\xcf\x11\xe0" + b"\x00" * 100, "renamed.pdf")
        assert outcome.reason == LEGACY_DOC_REASON

    def test_unknown_bytes(self):
        outcome = _dispatcher().dispatch(b"plain text resume", "cv.pdf")

        assert outcome.is_unsupported
        assert outcome.reason == UNKNOWN_FORMAT_REASON
