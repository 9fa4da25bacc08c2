"""
Format Dispatcher - picks an extraction strategy for a validated document.

The strategy is chosen from the document's BYTES (same signature check the
upload gatekeeper uses), never from its file name. A file renamed from
.doc to .pdf is still handled as legacy Word.

Outcomes:
- text_extracted: non-empty text, capped at max_chars
- unsupported:    nothing usable in the document (legacy .doc, unknown
                  format, empty or unreadable content, OCR unavailable)
"""

import logging

from resumeflow.core.errors import DocumentParseError
from resumeflow.models.resume import DocumentFormat, ExtractionOutcome
from resumeflow.services.extractors import DEFAULT_MAX_CHARS, DocxExtractor, PdfExtractor
from resumeflow.services.ocr_fallback import OcrFallback
from resumeflow.utils.file_signatures import sniff_format

logger = logging.getLogger(__name__)

LEGACY_DOC_REASON = "Legacy .doc format is not supported. Please convert to PDF or DOCX."
UNKNOWN_FORMAT_REASON = "Unsupported file type. Please upload PDF or DOCX."
EMPTY_PDF_REASON = "Unable to extract text from PDF."
EMPTY_DOCX_REASON = "Unable to extract text from DOCX."


class FormatDispatcher:

    def __init__(
        self,
        ocr_fallback: OcrFallback,
        max_chars: int = DEFAULT_MAX_CHARS,
        pdf_extractor: PdfExtractor = None,
        docx_extractor: DocxExtractor = None
    ):
        self.ocr_fallback = ocr_fallback
        self.pdf = pdf_extractor or PdfExtractor(max_chars)
        self.docx = docx_extractor or DocxExtractor(max_chars)

    def dispatch(self, content: bytes, file_name: str) -> ExtractionOutcome:
        fmt = sniff_format(content)

        if fmt == DocumentFormat.pdf:
            return self._extract_pdf(content, file_name)
        if fmt == DocumentFormat.docx:
            return self._extract_docx(content, file_name)
        if fmt == DocumentFormat.doc:
            logger.info("Legacy .doc format not supported: %s", file_name)
            return ExtractionOutcome.unsupported(LEGACY_DOC_REASON)

        logger.info("Unsupported file type: %s", file_name)
        return ExtractionOutcome.unsupported(UNKNOWN_FORMAT_REASON)

    def _extract_pdf(self, content: bytes, file_name: str) -> ExtractionOutcome:
        try:
            text = self.pdf.extract(content)
        except DocumentParseError as e:
            logger.error("File parsing error for %s: %s", file_name, e)
            text = ""

        if text.strip():
            logger.info("Extracted %s characters from PDF", len(text))
            return ExtractionOutcome.extracted(text)

        # Parse error or an empty text layer (typical for scans): try OCR.
        text = self.ocr_fallback.recover(content, file_name)
        if text:
            return ExtractionOutcome.extracted(text, used_ocr=True)
        return ExtractionOutcome.unsupported(EMPTY_PDF_REASON, used_ocr=self.ocr_fallback.available)

    def _extract_docx(self, content: bytes, file_name: str) -> ExtractionOutcome:
        try:
            text = self.docx.extract(content)
        except DocumentParseError as e:
            logger.error("File parsing error for %s: %s", file_name, e)
            text = ""

        if not text:
            return ExtractionOutcome.unsupported(EMPTY_DOCX_REASON)
        logger.info("Extracted %s characters from DOCX", len(text))
        return ExtractionOutcome.extracted(text)
