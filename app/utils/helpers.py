import logging
from typing import Optional, Any
import re
import time

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "jpg"


def get_file_extension(filename: str, default: str = DEFAULT_EXTENSION) -> str:
    """
    Get the extension of an uploaded file name

    Args:
        filename: Original file name as sent by the client
        default: Extension used when the name has none

    Returns:
        str: Text after the last dot (case preserved), or the default
    """
    if not filename or '.' not in filename:
        return default

    extension = filename.rsplit('.', 1)[-1]
    return extension or default


def strip_client_path(filename: str) -> str:
    """
    Reduce a client-supplied file name to its last path component

    Args:
        filename: File name as sent in Content-Disposition

    Returns:
        str: Text after the last '/' or '\\'
    """
    if not filename:
        return ""

    return re.split(r'[\\/]', filename)[-1]


def slugify_keyword(keyword: str) -> str:
    """
    Replace every run of whitespace in a keyword with a single dash

    Args:
        keyword: Keyword taken from the upload form

    Returns:
        str: Slugged keyword
    """
    return re.sub(r'\s+', '-', keyword)


def derive_upload_filename(keyword: str, original_filename: str, now_ms: int) -> str:
    """
    Build the destination name for an uploaded image

    The result is ``<slug(keyword)>-<now_ms>.<ext>`` and depends only on
    its arguments.

    Args:
        keyword: Keyword taken from the upload form
        original_filename: File name sent by the client
        now_ms: Milliseconds since the epoch

    Returns:
        str: Storage file name
    """
    return f"{slugify_keyword(keyword)}-{now_ms}.{get_file_extension(original_filename)}"


def current_millis() -> int:
    """Milliseconds since the epoch"""
    return int(time.time() * 1000)


def normalize_limit(value: Any, default: int, maximum: int) -> int:
    """
    Parse a page size coming from a query string

    Args:
        value: Raw value (string, int or None)
        default: Used when the value is missing, not a number or not positive
        maximum: Upper bound accepted by the remote API

    Returns:
        int: Page size between 1 and maximum
    """
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default

    if limit <= 0:
        return default

    return min(limit, maximum)


def describe_secret(value: Optional[str]) -> str:
    """
    Describe a credential without revealing it

    Args:
        value: The secret, possibly empty

    Returns:
        str: Whether it is set, and its length
    """
    if not value:
        return "✗ NOT SET"
    return f"✓ Set (length: {len(value)})"


def describe_setting(value: Optional[str], missing: str = "✗ NOT SET") -> str:
    """
    Describe a non-secret setting for diagnostics

    Args:
        value: Setting value, possibly empty
        missing: Text used when the value is empty

    Returns:
        str: Display string
    """
    if not value:
        return missing
    return f"✓ Set ({value})"


def normalize_whitespace(text: str) -> str:
    """
    Collapse runs of whitespace into single spaces

    Args:
        text: Text to normalize

    Returns:
        str: Normalized text
    """
    if not text:
        return ""

    return ' '.join(text.split())
