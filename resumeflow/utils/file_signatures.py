"""
File signature utility - identify resume formats from their bytes.

Client-declared file names and MIME types are untrusted. Only the leading
bytes (magic number) of the stored object say what it really is.

Supported formats:
- PDF  (.pdf)  25 50 44 46  "%PDF"
- DOC  (.doc)  D0 CF 11 E0  OLE2 compound file (legacy Word)
- DOCX (.docx) 50 4B 03 04  ZIP local file header (OOXML package)
"""

import re
from typing import Optional

from resumeflow.models.resume import DocumentFormat


SIGNATURE_LENGTH = 4

FILE_SIGNATURES = {
    DocumentFormat.pdf: bytes([0x25, 0x50, 0x44, 0x46]),
    DocumentFormat.doc: bytes([0xD0, 0xCF, 0x11, 0xE0]),
    DocumentFormat.docx: bytes([0x50, 0x4B, 0x03, 0x04]),
}

MIME_TYPES = {
    "application/pdf": DocumentFormat.pdf,
    "application/msword": DocumentFormat.doc,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": DocumentFormat.docx,
}

ALLOWED_MIME_TYPES = frozenset(MIME_TYPES)


def format_for_mime_type(mime_type: Optional[str]) -> Optional[DocumentFormat]:
    """Map a declared MIME type to a format, None if not allowed."""
    if not mime_type:
        return None
    return MIME_TYPES.get(mime_type.strip().lower())


def sniff_format(data: bytes) -> Optional[DocumentFormat]:
    """Detect the format from the leading bytes, None if unknown."""
    head = data[:SIGNATURE_LENGTH]
    for fmt, signature in FILE_SIGNATURES.items():
        if head == signature:
            return fmt
    return None


def signature_matches(data: bytes, fmt: DocumentFormat) -> bool:
    return data[:SIGNATURE_LENGTH] == FILE_SIGNATURES[fmt]


def hex_signature(data: bytes) -> str:
    """First bytes as 'xx xx xx xx' for log lines."""
    return " ".join(f"{b:02x}" for b in data[:SIGNATURE_LENGTH])


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_file_name(filename: Optional[str]) -> str:
    """Reduce a client file name to something usable inside a storage key."""
    name = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name[:120] or "resume"


def get_supported_formats(max_size_bytes: int) -> dict:
    """Get info about supported file formats."""
    return {
        "supported_formats": [
            {"extension": ".pdf", "mime_type": "application/pdf", "name": "PDF", "text_extraction": True},
            {
                "extension": ".docx",
                "mime_type": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                "name": "Word Document",
                "text_extraction": True
            },
            {"extension": ".doc", "mime_type": "application/msword", "name": "Legacy Word", "text_extraction": False},
        ],
        "max_size_mb": max_size_bytes // (1024 * 1024)
    }
