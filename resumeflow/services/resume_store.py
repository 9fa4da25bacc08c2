"""
Resume record persistence.

ResumeStore - CRUD over the `resumes` table plus ownership checks.
ExtractionResultStore - writes the final extraction outcome back onto the
owning record. It re-verifies ownership itself because extraction runs as
its own request.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.orm import Session

from resumeflow.core.errors import AuthorizationError, NotFoundError
from resumeflow.db.schema import resumes
from resumeflow.models.resume import (
    DocumentFormat,
    ExtractionOutcome,
    ExtractionStatus,
    ResumeDocument,
    can_transition,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _row_to_document(row) -> ResumeDocument:
    return ResumeDocument(
        id=row.resume_id,
        owner_id=row.owner_id,
        file_name=row.file_name,
        size_bytes=row.size_bytes,
        declared_mime_type=row.declared_mime_type,
        storage_key=row.storage_key,
        detected_format=row.detected_format,
        text_content=row.text_content,
        extraction_status=row.extraction_status,
        extraction_reason=row.extraction_reason,
        ats_score=row.ats_score,
        ats_feedback=row.ats_feedback,
        created_at=row.created_at,
        updated_at=row.updated_at
    )


class ResumeStore:
    """
    Data access for resume records.
    Every write commits immediately - a failure later in the request must not
    roll back a status change that already happened.
    """

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        owner_id: int,
        file_name: str,
        size_bytes: int,
        declared_mime_type: str,
        storage_key: str
    ) -> ResumeDocument:
        now = _now()
        result = self.session.execute(
            insert(resumes).values(
                owner_id=owner_id,
                file_name=file_name,
                size_bytes=size_bytes,
                declared_mime_type=declared_mime_type,
                storage_key=storage_key,
                extraction_status=ExtractionStatus.uploaded.value,
                created_at=now,
                updated_at=now
            )
        )
        self.session.commit()
        return self.get(result.inserted_primary_key[0])

    def get(self, resume_id: int) -> Optional[ResumeDocument]:
        row = self.session.execute(
            select(resumes).where(resumes.c.resume_id == resume_id)
        ).fetchone()
        return _row_to_document(row) if row else None

    def get_by_storage_key(self, storage_key: str) -> Optional[ResumeDocument]:
        row = self.session.execute(
            select(resumes).where(resumes.c.storage_key == storage_key)
        ).fetchone()
        return _row_to_document(row) if row else None

    def list_for_owner(self, owner_id: int) -> List[ResumeDocument]:
        rows = self.session.execute(
            select(resumes)
            .where(resumes.c.owner_id == owner_id)
            .order_by(resumes.c.created_at.desc(), resumes.c.resume_id.desc())
        ).fetchall()
        return [_row_to_document(r) for r in rows]

    def get_owned(self, resume_id: int, user_id: int, allow_admin: bool = False) -> ResumeDocument:
        """
        Load a resume and verify the caller owns it.

        Raises:
            NotFoundError: no such resume
            AuthorizationError: resume belongs to someone else
        """
        document = self.get(resume_id)
        if document is None:
            raise NotFoundError("Resume not found")
        if document.owner_id != user_id and not allow_admin:
            raise AuthorizationError("Unauthorized to access this resume")
        return document

    def set_status(
        self,
        resume_id: int,
        status: ExtractionStatus,
        reason: Optional[str] = None,
        detected_format: Optional[DocumentFormat] = None
    ) -> ResumeDocument:
        """Move a resume along the extraction state machine."""
        document = self.get(resume_id)
        if document is None:
            raise NotFoundError("Resume not found")
        if document.extraction_status != status and not can_transition(document.extraction_status, status):
            raise ValueError(f"Illegal status change {document.extraction_status.value} -> {status.value}")

        values = {
            "extraction_status": status.value,
            "extraction_reason": reason,
            "updated_at": _now()
        }
        if detected_format is not None:
            values["detected_format"] = detected_format.value
        if status != ExtractionStatus.text_extracted:
            values["text_content"] = None

        self.session.execute(update(resumes).where(resumes.c.resume_id == resume_id).values(**values))
        self.session.commit()
        return self.get(resume_id)

    def save_analysis(self, resume_id: int, ats_score: Optional[int], feedback: Any) -> None:
        self.session.execute(
            update(resumes)
            .where(resumes.c.resume_id == resume_id)
            .values(ats_score=ats_score, ats_feedback=feedback, updated_at=_now())
        )
        self.session.commit()

    def delete(self, resume_id: int) -> None:
        self.session.execute(delete(resumes).where(resumes.c.resume_id == resume_id))
        self.session.commit()


class ExtractionResultStore:
    """
    Persists extraction outcomes.

    The write is an upsert of (text_content, extraction_status,
    extraction_reason) keyed by resume id - running the same extraction twice
    leaves the same row. Concurrent extractions of one resume race on this
    write and the last one wins.
    """

    def __init__(self, store: ResumeStore):
        self.store = store

    def save(self, resume_id: int, requester_id: int, outcome: ExtractionOutcome) -> ResumeDocument:
        self.store.get_owned(resume_id, requester_id)

        text_content = outcome.text if outcome.status == ExtractionStatus.text_extracted else None
        self.store.session.execute(
            update(resumes)
            .where(resumes.c.resume_id == resume_id)
            .values(
                text_content=text_content,
                extraction_status=outcome.status.value,
                extraction_reason=outcome.reason,
                updated_at=_now()
            )
        )
        self.store.session.commit()
        logger.info(
            "Saved extraction for resume %s: status=%s length=%s ocr=%s",
            resume_id, outcome.status.value, len(text_content or ""), outcome.used_ocr
        )
        return self.store.get(resume_id)

    def mark_failed(self, resume_id: int, requester_id: int, reason: str) -> None:
        """Record a transient failure; a later request may retry."""
        self.store.get_owned(resume_id, requester_id)
        self.store.set_status(resume_id, ExtractionStatus.extraction_failed, reason=reason)
