"""
Utility functions and helpers
"""

from .helpers import (
    get_file_extension,
    strip_client_path,
    slugify_keyword,
    derive_upload_filename,
    current_millis,
    normalize_limit,
    describe_secret,
    describe_setting,
    normalize_whitespace
)

__all__ = [
    "get_file_extension",
    "strip_client_path",
    "slugify_keyword",
    "derive_upload_filename",
    "current_millis",
    "normalize_limit",
    "describe_secret",
    "describe_setting",
    "normalize_whitespace"
]
