"""
Format-specific text extractors.

- PDF  using PyPDF2, page by page, stops at the character budget
- DOCX using python-docx to open the package, then a markup strip of the
  main document part

Both raise DocumentParseError when the bytes cannot be parsed; they never
decide what happens next - that is the dispatcher's job.
"""

import html
import io
import logging
import re

from PyPDF2 import PdfReader
from docx import Document

from resumeflow.core.errors import DocumentParseError

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 20000
PAGE_SEPARATOR = "\n\n"

_BREAKS = re.compile(r"<w:(?:p|br|cr|tab)\b[^>]*>|</w:p>")
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


class PdfExtractor:
    """
    Concatenate page texts in order, separated by a blank line.

    Output is capped at `max_chars`: once the budget is reached no further
    pages are read, so long documents yield a prefix of their text.
    """

    def __init__(self, max_chars: int = DEFAULT_MAX_CHARS):
        self.max_chars = max_chars

    def extract(self, content: bytes) -> str:
        try:
            reader = PdfReader(io.BytesIO(content))
            logger.info("PDF has %s pages", len(reader.pages))

            full_text = ""
            for page in reader.pages:
                if len(full_text) >= self.max_chars:
                    break
                page_text = page.extract_text() or ""
                full_text += (PAGE_SEPARATOR if full_text else "") + page_text
        except Exception as e:
            raise DocumentParseError(f"Error reading PDF: {e}") from e

        return full_text[:self.max_chars]


def docx_xml_to_text(xml: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """
    Plain text from WordprocessingML markup.

    Paragraph, line-break and tab elements become spaces; every other tag is
    dropped so a word split across runs stays whole. Entities are decoded
    after tags are gone (&amp; &lt; &gt; &quot; &#39; and any other
    reference) and whitespace runs collapse to a single space.
    """
    text = _BREAKS.sub(" ", xml)
    text = _TAG.sub("", text)
    text = html.unescape(text)
    text = _WHITESPACE.sub(" ", text).strip()
    return text[:max_chars]


class DocxExtractor:
    """Text of the main document part of a .docx package."""

    def __init__(self, max_chars: int = DEFAULT_MAX_CHARS):
        self.max_chars = max_chars

    def extract(self, content: bytes) -> str:
        try:
            document = Document(io.BytesIO(content))
            xml = document.part.blob.decode("utf-8")
        except Exception as e:
            raise DocumentParseError(f"Error reading DOCX: {e}") from e

        return docx_xml_to_text(xml, self.max_chars)
