import logging
from typing import Optional

from resumeflow.services.ocr_client import OcrError, OcrSpaceClient

logger = logging.getLogger(__name__)


class OcrFallback:
    """
    Last-resort text for PDFs the direct parser could not read.

    Any OCR problem (no client configured, HTTP failure, provider error)
    yields an empty string: the caller then reports the document as
    unsupported. No retries.
    """

    def __init__(self, client: Optional[OcrSpaceClient], max_chars: int = 20000):
        self.client = client
        self.max_chars = max_chars

    @property
    def available(self) -> bool:
        return self.client is not None

    def recover(self, content: bytes, file_name: str) -> str:
        if self.client is None:
            logger.warning("OCR_SPACE_API_KEY not configured; skipping OCR fallback")
            return ""

        try:
            text = self.client.recognize(content, file_name)
        except OcrError as e:
            logger.error("OCR fallback error: %s", e)
            return ""

        text = text[:self.max_chars].strip()
        logger.info("OCR extracted %s characters", len(text))
        return text
