import logging

from app.models.schemas import DocumentSection, ParsedDocument
from app.utils.parsing import looks_like_html, html_sections, markdown_sections

logger = logging.getLogger(__name__)


class DocumentParseError(ValueError):
    """Raised when a document cannot be split into sections"""


def parse_document(text: str) -> ParsedDocument:
    """
    Split a document into titled sections

    HTML input is split on h1-h6 elements, anything else on Markdown ATX
    headings. Text before the first heading becomes an untitled section
    at level 0.

    Args:
        text: Raw document text

    Returns:
        ParsedDocument with the sections in document order

    Raises:
        DocumentParseError: if the document is empty or has no content
    """
    if not isinstance(text, str):
        raise DocumentParseError(f"Document must be a string, got {type(text).__name__}")
    if not text.strip():
        raise DocumentParseError("Document is empty")

    if looks_like_html(text):
        logger.debug("Parsing document as HTML")
        raw_sections = html_sections(text)
    else:
        logger.debug("Parsing document as Markdown/plain text")
        raw_sections = markdown_sections(text)

    sections = []
    for heading, level, paragraphs in raw_sections:
        content = "\n\n".join(paragraphs)
        sections.append(DocumentSection(
            heading=heading,
            level=level,
            content=content,
            word_count=len(content.split())
        ))

    if not sections:
        raise DocumentParseError("Document does not contain any readable sections")

    return ParsedDocument(sections=sections)
