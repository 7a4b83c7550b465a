"""Core utilities for applecast.

This module provides:
- Text normalization for extracted metadata values
- URL validation for the episode page URL
- Filesystem helpers for output files
- Progress reporting abstraction
"""

from .filesystem import (
    metadata_filename,
    resolve_output_dir,
    write_file,
    write_text,
)
from .progress import (
    progress_context,
    ProgressFactory,
    ProgressReporter,
    set_progress_factory,
)
from .text import clean_text, strip_inline_tags
from .url_validation import validate_url

__all__ = [
    # Filesystem exports
    "metadata_filename",
    "resolve_output_dir",
    "write_file",
    "write_text",
    # Progress exports
    "ProgressFactory",
    "ProgressReporter",
    "progress_context",
    "set_progress_factory",
    # Text exports
    "clean_text",
    "strip_inline_tags",
    # Validation exports
    "validate_url",
]
