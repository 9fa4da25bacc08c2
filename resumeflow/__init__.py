"""
Resume Ingestion Service
Upload validation, text extraction and scoring for candidate resumes.

Architecture:
- PostgreSQL: resume records, users, rate-limit events
- MongoDB GridFS: uploaded resume files
- OCR.space: recognition for scanned PDFs
- DeepSeek AI: ATS scoring of extracted text (not a database!)
"""

__version__ = "1.0.0"
