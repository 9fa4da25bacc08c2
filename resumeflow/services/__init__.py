"""
Services - the ingestion pipeline and its collaborators.

- rate_limiter:       sliding-window quotas shared by AI-assisted endpoints
- upload_gatekeeper:  size / type / magic-number validation of uploads
- extractors:         PDF and DOCX text pullers
- ocr_client:         OCR.space HTTP client
- ocr_fallback:       OCR as last resort for unreadable PDFs
- format_dispatcher:  content-sniffed strategy selection
- resume_store:       resume records and extraction result persistence
- extraction_service: the extract-text operation
- scoring_client / resume_analysis: downstream ATS scoring
"""
