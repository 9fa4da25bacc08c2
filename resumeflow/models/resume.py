"""
Resume domain models.

ResumeDocument mirrors one row of the `resumes` table. ExtractionOutcome is
what the format dispatcher hands to the result store.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class DocumentFormat(str, Enum):
    pdf = "pdf"
    doc = "doc"
    docx = "docx"


class ExtractionStatus(str, Enum):
    uploaded = "uploaded"
    rejected = "rejected"
    validated = "validated"
    extracting = "extracting"
    text_extracted = "text_extracted"
    unsupported = "unsupported"
    extraction_failed = "extraction_failed"


# status -> statuses it may move to
TRANSITIONS = {
    ExtractionStatus.uploaded: {ExtractionStatus.rejected, ExtractionStatus.validated},
    ExtractionStatus.validated: {ExtractionStatus.extracting},
    # re-entry: a request that died mid-extraction, or a concurrent one
    ExtractionStatus.extracting: {
        ExtractionStatus.extracting,
        ExtractionStatus.text_extracted,
        ExtractionStatus.unsupported,
        ExtractionStatus.extraction_failed,
    },
    ExtractionStatus.extraction_failed: {ExtractionStatus.extracting},
    # explicit re-runs; extraction is deterministic so the result is the same
    ExtractionStatus.text_extracted: {ExtractionStatus.extracting},
    ExtractionStatus.unsupported: {ExtractionStatus.extracting},
    ExtractionStatus.rejected: set(),
}

EXTRACTABLE_STATUSES = {
    status for status, targets in TRANSITIONS.items()
    if ExtractionStatus.extracting in targets
}


def can_transition(current: ExtractionStatus, target: ExtractionStatus) -> bool:
    return target in TRANSITIONS.get(current, set())


class ResumeDocument(BaseModel):
    id: int
    owner_id: int
    file_name: str
    size_bytes: int
    declared_mime_type: str
    storage_key: str
    detected_format: Optional[DocumentFormat] = None
    text_content: Optional[str] = None
    extraction_status: ExtractionStatus = ExtractionStatus.uploaded
    extraction_reason: Optional[str] = None
    ats_score: Optional[int] = None
    ats_feedback: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ExtractionOutcome:
    """Result of one extraction attempt.

    Only two states are possible here: text came out, or the document
    genuinely has nothing usable. Broken infrastructure is raised as
    TransientExternalError instead.
    """

    status: ExtractionStatus
    text: str = ""
    reason: Optional[str] = None
    used_ocr: bool = False

    @classmethod
    def extracted(cls, text: str, used_ocr: bool = False) -> "ExtractionOutcome":
        return cls(status=ExtractionStatus.text_extracted, text=text, used_ocr=used_ocr)

    @classmethod
    def unsupported(cls, reason: str, used_ocr: bool = False) -> "ExtractionOutcome":
        return cls(status=ExtractionStatus.unsupported, reason=reason, used_ocr=used_ocr)

    @property
    def is_unsupported(self) -> bool:
        return self.status == ExtractionStatus.unsupported
