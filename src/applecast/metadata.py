"""Episode metadata extraction from a podcast episode page.

Two strategies are tried in order:

1. The embedded episode schema (``<script id="schema:episode">`` JSON-LD).
2. A scan of ``<meta>`` tags (Open Graph, page metadata and itemprop hints).

The second strategy only runs when the first one raises; its results are
never merged with a partial result from the first.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from .exceptions import ExtractionError, ParseError
from .models import EpisodeMetadata
from .utils import filesystem
from .utils.text import clean_text

logger = logging.getLogger(__name__)

HTML_PARSER = "html.parser"
EPISODE_SCHEMA_SELECTOR = 'script[id="schema:episode"]'
OG_DESCRIPTION_SELECTOR = 'meta[property="og:description"]'
# og:description usually reads "Podcast Episode · Show Name · Date"
OG_DESCRIPTION_DELIMITER = " · "

_PROPERTY_FIELDS: Dict[str, str] = {
    "og:title": "episode_title",
    "og:description": "description",
    "og:site_name": "show_title",
}
_NAME_FIELDS: Dict[str, str] = {
    "apple:title": "episode_title",
    "description": "description",
    "apple:description": "description",
}
_ITEMPROP_FIELDS: Dict[str, str] = {
    "name": "episode_title",
    "headline": "episode_title",
    "description": "description",
    "publisher": "show_title",
    "datePublished": "publish_date",
}
# Checked in this order; the first attribute present on a tag decides its family
_META_ATTRIBUTE_FAMILIES: Tuple[Tuple[str, Dict[str, str]], ...] = (
    ("property", _PROPERTY_FIELDS),
    ("name", _NAME_FIELDS),
    ("itemprop", _ITEMPROP_FIELDS),
)


def parse_document(html: str) -> BeautifulSoup:
    """Parse page markup into a BeautifulSoup tree.

    Raises:
        ParseError: If the parser rejects the markup.
    """
    try:
        return BeautifulSoup(html, HTML_PARSER)
    except ParserRejectedMarkup as exc:
        raise ParseError(f"Failed to parse HTML document: {exc}") from exc


def _string_at(data: Any, *keys: str) -> str:
    value = data
    for key in keys:
        if not isinstance(value, dict):
            return ""
        value = value.get(key)
    return value.strip() if isinstance(value, str) else ""


def extract_from_json_ld(document: BeautifulSoup) -> EpisodeMetadata:
    """Extract metadata from the embedded episode schema block.

    Missing keys or non-string values yield empty fields rather than an error.

    Raises:
        ParseError: If the schema block is absent or is not valid JSON. Nesting too deep
            for the JSON decoder counts as invalid.
    """
    script = document.select_one(EPISODE_SCHEMA_SELECTOR)
    if script is None:
        raise ParseError("JSON-LD schema not found")

    try:
        data = json.loads(script.string or "")
    except (ValueError, RecursionError) as exc:
        raise ParseError(f"Failed to parse JSON-LD: {exc}") from exc

    return EpisodeMetadata(
        episode_title=_string_at(data, "name"),
        description=_string_at(data, "description"),
        show_title=_string_at(data, "partOfSeries", "name"),
        publish_date=_string_at(data, "datePublished"),
    )


def _show_title_from_og_description(document: BeautifulSoup) -> str:
    tag = document.select_one(OG_DESCRIPTION_SELECTOR)
    if tag is None:
        return ""
    content = tag.get("content")
    if not isinstance(content, str):
        return ""
    parts = content.split(OG_DESCRIPTION_DELIMITER)
    if len(parts) < 2:
        return ""
    return parts[1].strip()


def extract_from_meta_tags(document: BeautifulSoup) -> EpisodeMetadata:
    """Extract metadata by scanning ``<meta>`` tags in document order.

    For each tag, the first of ``property``, ``name`` and ``itemprop`` that is
    present selects a lookup table mapping attribute values to fields. A field
    keeps the first value found for it. Values pass through :func:`clean_text`.

    If no show title was found, the second ``" · "``-separated part of the
    ``og:description`` content is used when there is one.
    """
    fields: Dict[str, str] = {
        "episode_title": "",
        "description": "",
        "show_title": "",
        "publish_date": "",
    }

    for element in document.find_all("meta"):
        for attribute, table in _META_ATTRIBUTE_FAMILIES:
            key = element.get(attribute)
            if key is None:
                continue
            field = table.get(key)
            content = element.get("content")
            if field and not fields[field] and isinstance(content, str):
                fields[field] = clean_text(content)
            break

    if not fields["show_title"]:
        fields["show_title"] = _show_title_from_og_description(document)

    return EpisodeMetadata(**fields)


def extract_metadata(html: str) -> EpisodeMetadata:
    """Extract episode metadata from page markup.

    The episode schema is tried first; if it is missing or malformed the
    ``<meta>`` tag scan runs instead. Whichever strategy succeeds supplies the
    whole result, even when some of its fields are empty.

    Raises:
        ExtractionError: If the document cannot be parsed at all.
    """
    try:
        document = parse_document(html)
    except ParseError as exc:
        raise ExtractionError(f"Failed to extract metadata: {exc}") from exc

    try:
        metadata = extract_from_json_ld(document)
        logger.debug("Metadata extracted from episode schema")
        return metadata
    except ParseError as exc:
        logger.debug("Episode schema unusable (%s); falling back to meta tags", exc)

    try:
        metadata = extract_from_meta_tags(document)
    except (AttributeError, TypeError, ValueError) as exc:
        raise ExtractionError(f"Failed to extract metadata from meta tags: {exc}") from exc
    logger.debug("Metadata extracted from meta tags")
    return metadata


def serialize_metadata(metadata: EpisodeMetadata, metadata_format: str = "json") -> str:
    """Render metadata as a pretty-printed JSON (default) or YAML document."""
    if metadata_format == "yaml":
        return yaml.dump(
            metadata.model_dump(),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    return metadata.model_dump_json(indent=2)


def save_metadata(
    metadata: EpisodeMetadata,
    output_path: str | Path,
    metadata_format: Optional[str] = None,
) -> int:
    """Write the metadata document, creating parent directories as needed.

    The format defaults to the file extension (``.yaml``/``.yml`` for YAML,
    anything else JSON).

    Returns:
        Number of bytes written.

    Raises:
        StorageError: If the file cannot be written.
    """
    if metadata_format is None:
        suffix = Path(output_path).suffix.lower()
        metadata_format = "yaml" if suffix in (".yaml", ".yml") else "json"
    content = serialize_metadata(metadata, metadata_format)
    written = filesystem.write_text(output_path, content)
    logger.debug("[STORAGE I/O] file=%s bytes=%d format=%s", output_path, written, metadata_format)
    return written
