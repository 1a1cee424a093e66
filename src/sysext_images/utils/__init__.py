"""Utility functions for the sysext image metadata client."""

from .digest import calculate_file_digest, validate_digest, verify_file_digest
from .names import is_image_filename, matches_name_filter, short_name
from .tmpfile import PrivateTempFile
from .version import compare_versions, is_newer

__all__ = [
    "PrivateTempFile",
    "calculate_file_digest",
    "compare_versions",
    "is_image_filename",
    "is_newer",
    "matches_name_filter",
    "short_name",
    "validate_digest",
    "verify_file_digest",
]
