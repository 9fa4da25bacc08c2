"""
Resume Analysis Service - ATS scoring of extracted resume text.

AI OUTPUT -> VALIDATED -> STORED ON THE RESUME
The scoring model is an opaque collaborator; everything it returns is
sanitised before it reaches the database or the client.
"""

import logging
from typing import Optional

from resumeflow.core.errors import TransientExternalError, UploadValidationError
from resumeflow.services.rate_limiter import ANALYZE_RESUME, RateLimiter
from resumeflow.services.resume_store import ResumeStore
from resumeflow.services.scoring_client import ScoringClient

logger = logging.getLogger(__name__)

SEVERITIES = {"high", "medium", "low"}


def _str_list(value) -> list:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v]


def validate_analysis(data: dict) -> dict:
    """
    Validate and sanitize scoring output.
    Ensures all fields exist with correct types.
    """
    validated = {
        "atsScore": 0,
        "issues": [],
        "suggestions": [],
        "keywordGaps": _str_list(data.get("keywordGaps")),
        "strengths": _str_list(data.get("strengths"))
    }

    # Score must be an int in 0..100
    try:
        validated["atsScore"] = min(100, max(0, int(round(float(data.get("atsScore", 0))))))
    except (ValueError, TypeError):
        validated["atsScore"] = 0

    issues = data.get("issues", [])
    if isinstance(issues, list):
        for item in issues:
            if isinstance(item, dict) and item.get("issue"):
                severity = str(item.get("severity", "medium")).lower()
                validated["issues"].append({
                    "category": str(item.get("category", "content")).strip(),
                    "issue": str(item["issue"]).strip(),
                    "severity": severity if severity in SEVERITIES else "medium"
                })

    suggestions = data.get("suggestions", [])
    if isinstance(suggestions, list):
        for item in suggestions:
            if isinstance(item, dict) and item.get("suggestion"):
                priority = str(item.get("priority", "medium")).lower()
                validated["suggestions"].append({
                    "priority": priority if priority in SEVERITIES else "medium",
                    "suggestion": str(item["suggestion"]).strip(),
                    "impact": str(item.get("impact", "")).strip()
                })

    return validated


class ResumeAnalysisService:

    def __init__(self, scoring_client: Optional[ScoringClient], rate_limiter: RateLimiter, resume_store: ResumeStore):
        self.scoring_client = scoring_client
        self.rate_limiter = rate_limiter
        self.resume_store = resume_store

    def analyze(
        self,
        user_id: int,
        resume_id: Optional[int] = None,
        text_content: Optional[str] = None,
        target_role: Optional[str] = None
    ) -> dict:
        self.rate_limiter.hit(user_id, ANALYZE_RESUME)

        if self.scoring_client is None:
            raise TransientExternalError("DEEPSEEK_API_KEY is not configured")

        resume_text = text_content
        if resume_id is not None and not text_content:
            document = self.resume_store.get_owned(resume_id, user_id)
            resume_text = document.text_content

        if not resume_text or not resume_text.strip():
            raise UploadValidationError("No resume content provided")

        try:
            raw = self.scoring_client.score_resume(resume_text, target_role)
        except Exception as e:
            logger.exception("Resume analysis error")
            raise TransientExternalError(f"Scoring service error: {e}") from e

        analysis = validate_analysis(raw if isinstance(raw, dict) else {})

        if resume_id is not None:
            # ownership was not checked when the caller sent text directly
            self.resume_store.get_owned(resume_id, user_id)
            self.resume_store.save_analysis(resume_id, analysis["atsScore"], analysis)

        return analysis
