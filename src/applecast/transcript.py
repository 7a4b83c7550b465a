"""Locate the transcript URL embedded in an episode page.

Episode pages carry a serialized server-data JSON payload. Somewhere inside
it, an episode offer may contain ``closedCaptions: {"url": "..."}`` pointing
at the transcript (TTML) file.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

# DOTALL also matches payloads that span several lines, which a line-bound pattern would miss
SERVER_DATA_PATTERN = re.compile(
    r'<script type="application/json" id="serialized-server-data">(.*?)</script>',
    re.DOTALL,
)
CLOSED_CAPTIONS_KEY = "closedCaptions"
URL_KEY = "url"


def extract_server_data(html: str) -> Optional[str]:
    """Return the raw text of the serialized server-data script, if present."""
    match = SERVER_DATA_PATTERN.search(html)
    if match is None:
        return None
    return match.group(1)


def find_closed_captions_url(value: Any) -> Optional[str]:
    """Depth-first search for the first ``closedCaptions.url`` string.

    Objects are checked for the key before their values are searched, values
    and array elements are visited in order, and the first match wins.
    """
    if isinstance(value, dict):
        captions = value.get(CLOSED_CAPTIONS_KEY)
        if isinstance(captions, dict):
            url = captions.get(URL_KEY)
            if isinstance(url, str):
                return url
        for child in value.values():
            found = find_closed_captions_url(child)
            if found is not None:
                return found
        return None
    if isinstance(value, list):
        for child in value:
            found = find_closed_captions_url(child)
            if found is not None:
                return found
    return None


def find_transcript_url(html: str) -> Optional[str]:
    """Find the transcript URL in an episode page, or ``None``.

    A missing or malformed server-data payload means there is no transcript;
    neither case raises.
    """
    payload = extract_server_data(html)
    if payload is None:
        logger.debug("No serialized server data found in page")
        return None

    try:
        data = json.loads(payload)
    except (ValueError, RecursionError) as exc:
        logger.debug("Serialized server data is not valid JSON: %s", exc)
        return None

    try:
        url = find_closed_captions_url(data)
    except RecursionError:
        logger.debug("Serialized server data is nested too deeply to search")
        return None
    if url is None:
        logger.debug("No closedCaptions URL in serialized server data")
    return url
