"""
Models module - domain data structures shared by services and routes.

API request/response contracts live in `resumeflow.schemas` instead.
"""

from resumeflow.models.resume import (
    DocumentFormat,
    ExtractionOutcome,
    ExtractionStatus,
    ResumeDocument,
)

__all__ = [
    "DocumentFormat",
    "ExtractionOutcome",
    "ExtractionStatus",
    "ResumeDocument",
]
