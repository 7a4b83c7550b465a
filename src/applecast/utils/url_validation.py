"""Syntactic URL validation for the episode page URL."""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from ..config_constants import ALLOWED_URL_SCHEMES
from ..exceptions import InvalidUrlError

logger = logging.getLogger(__name__)


def validate_url(url: str) -> str:
    """Check that ``url`` is a well-formed absolute http(s) URL.

    Validation is purely syntactic; no network access happens here.

    Args:
        url: Candidate URL string.

    Returns:
        The URL, unchanged.

    Raises:
        InvalidUrlError: If the string is empty, contains whitespace, lacks a
            scheme or host, uses a scheme other than http/https, or cannot be
            parsed. The error message includes the original string.
    """
    if not url or any(ch.isspace() for ch in url):
        raise InvalidUrlError(url)

    try:
        parts = urlsplit(url)
        # Accessing .port validates the port component
        parts.port
    except ValueError as exc:
        raise InvalidUrlError(url) from exc

    if parts.scheme.lower() not in ALLOWED_URL_SCHEMES:
        raise InvalidUrlError(url, suggestion="Use an absolute http:// or https:// URL")
    if not parts.netloc or not parts.hostname:
        raise InvalidUrlError(url, suggestion="The URL must include a host name")

    logger.debug("URL %s passed validation", url)
    return url
