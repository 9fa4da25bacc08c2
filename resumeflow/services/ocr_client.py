"""
OCR.space API Client

Optical recognition for scanned PDFs. Sends the raw document bytes as a
multipart upload and returns the recognised text of all parsed pages.

Request options:
- language: hint for the recognizer (eng by default)
- OCREngine 2: better on mixed fonts and numbers
- isTable: keeps row order in tabular layouts (skills tables, timelines)
"""
import logging
from typing import Optional

import httpx

from resumeflow.core.config import Settings

logger = logging.getLogger(__name__)


class OcrError(Exception):
    """The recognition service failed or reported a processing error."""


class OcrSpaceClient:
    """
    Thin wrapper over the OCR.space parse endpoint.
    """

    def __init__(
        self,
        api_key: str,
        url: str = "https://api.ocr.space/parse/image",
        language: str = "eng",
        engine: int = 2,
        timeout: float = 60.0,
        http_client: Optional[httpx.Client] = None
    ):
        self.api_key = api_key
        self.url = url
        self.language = language
        self.engine = engine
        self.http = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["OcrSpaceClient"]:
        """None when no API key is configured - OCR is then unavailable."""
        if not settings.ocr_configured:
            return None
        return cls(
            api_key=settings.ocr_space_api_key,
            url=settings.ocr_space_url,
            language=settings.ocr_language,
            engine=settings.ocr_engine,
            timeout=settings.ocr_timeout_seconds
        )

    def recognize(self, content: bytes, file_name: str, mime_type: str = "application/pdf") -> str:
        """
        Run OCR over a document.

        Returns:
            Text of every parsed page joined by newlines (may be empty)

        Raises:
            OcrError on transport errors, HTTP errors or provider errors
        """
        form = {
            "apikey": self.api_key,
            "language": self.language,
            "OCREngine": str(self.engine),
            "scale": "true",
            "isTable": "true",
            "isOverlayRequired": "false",
        }
        files = {"file": (file_name, content, mime_type)}

        try:
            response = self.http.post(self.url, data=form, files=files)
        except httpx.HTTPError as e:
            raise OcrError(f"OCR request failed: {e}") from e

        if response.status_code != 200:
            raise OcrError(f"OCR HTTP error: {response.status_code} {response.text[:200]}")

        try:
            payload = response.json()
        except ValueError as e:
            raise OcrError("OCR returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise OcrError(f"OCR returned unexpected payload: {type(payload).__name__}")

        errored = payload.get("IsErroredOnProcessing") or payload.get("isErroredOnProcessing")
        results = payload.get("ParsedResults") or []
        if errored or not results:
            detail = payload.get("ErrorMessage") or payload.get("ErrorDetails") or "no parsed results"
            raise OcrError(f"OCR provider error: {detail}")

        if not isinstance(results, list) or not all(isinstance(r, dict) for r in results):
            raise OcrError("OCR returned malformed ParsedResults")

        return "\n".join(str(r.get("ParsedText") or "") for r in results)

    def close(self) -> None:
        self.http.close()
