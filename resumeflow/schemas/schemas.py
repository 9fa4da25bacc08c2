"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Resume endpoints speak camelCase on the wire (fileName, storageKey, ...).
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from enum import Enum

from resumeflow.models.resume import ExtractionStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    candidate = "candidate"
    coach = "coach"
    admin = "admin"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.candidate

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str

class UserResponse(BaseModel):
    user_id: int
    email: str
    role: str
    is_active: bool
    created_at: datetime


# ============================================================
# RESUME INGESTION SCHEMAS
# ============================================================

class UploadResponse(CamelModel):
    id: int
    storage_key: str
    file_name: str
    size_bytes: int
    mime_type: str
    extraction_status: ExtractionStatus

class ValidateUploadRequest(CamelModel):
    file_name: str = Field(..., min_length=1)
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    storage_key: str = Field(..., min_length=1)

class ValidateUploadResponse(BaseModel):
    valid: bool
    error: Optional[str] = None

class ExtractTextRequest(CamelModel):
    document_id: int
    storage_key: str = Field(..., min_length=1)

class ExtractTextResponse(CamelModel):
    success: bool
    text_length: Optional[int] = None
    has_text: Optional[bool] = None
    unsupported: Optional[bool] = None
    reason: Optional[str] = None

class AnalyzeRequest(CamelModel):
    resume_id: Optional[int] = None
    text_content: Optional[str] = None
    target_role: Optional[str] = None

class ResumeResponse(CamelModel):
    id: int
    file_name: str
    size_bytes: int
    declared_mime_type: str
    storage_key: str
    detected_format: Optional[str] = None
    extraction_status: ExtractionStatus
    extraction_reason: Optional[str] = None
    text_length: int = 0
    ats_score: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ResumeListResponse(BaseModel):
    resumes: List[ResumeResponse]
    total: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
