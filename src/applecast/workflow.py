"""Single-episode pipeline: fetch page, extract metadata, fetch transcript."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from . import config, downloader, metadata, transcript
from .config_constants import HTML_SNAPSHOT_FILENAME, TRANSCRIPT_FILENAME
from .downloader import Transport
from .exceptions import ApplecastError, StorageError
from .models import EpisodeMetadata
from .utils import filesystem
from .utils.url_validation import validate_url

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class TranscriptStatus(str, Enum):
    """Outcome of the transcript step; none of these fail the run."""

    DOWNLOADED = "downloaded"
    DOWNLOAD_FAILED = "download_failed"
    NOT_FOUND = "not_found"
    SKIPPED = "skipped"


@dataclass
class PipelineResult:
    """Result of a pipeline run.

    Attributes:
        html_path: Where the page snapshot was written
        metadata_path: Where the metadata document was written
        metadata: Extracted episode metadata
        transcript_status: Outcome of the transcript step
        transcript_url: Transcript URL found in the page, if any
        transcript_path: Where the transcript was written, if downloaded
        transcript_error: Reason the transcript download failed, if it did
    """

    html_path: Path
    metadata_path: Path
    metadata: EpisodeMetadata
    transcript_status: TranscriptStatus
    transcript_url: Optional[str] = None
    transcript_path: Optional[Path] = None
    transcript_error: Optional[str] = None

    @property
    def summary(self) -> str:
        title = self.metadata.episode_title or "untitled episode"
        if self.transcript_status is TranscriptStatus.DOWNLOADED:
            transcript_part = f"transcript saved to {self.transcript_path}"
        elif self.transcript_status is TranscriptStatus.DOWNLOAD_FAILED:
            transcript_part = "transcript download failed"
        elif self.transcript_status is TranscriptStatus.SKIPPED:
            transcript_part = "transcript skipped"
        else:
            transcript_part = "no transcript available"
        return f"Done: '{title}' metadata saved to {self.metadata_path}; {transcript_part}"


def apply_log_level(level: str, log_file: Optional[str] = None) -> None:
    """Apply logging level to root logger and configure handlers.

    Args:
        level: Log level string (e.g., 'DEBUG', 'INFO', 'WARNING')
        log_file: Optional path to log file. If provided, logs will be written to both
                  console and file.

    Raises:
        ValueError: If log level is invalid
        OSError: If log file cannot be created or written to
    """
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    root_logger = logging.getLogger()
    formatter = logging.Formatter(LOG_FORMAT)

    if not root_logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)
    else:
        for handler in root_logger.handlers:
            handler.setLevel(numeric_level)
    root_logger.setLevel(numeric_level)

    if log_file:
        log_path = os.path.abspath(log_file)
        file_handler_exists = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == log_path
            for h in root_logger.handlers
        )
        if not file_handler_exists:
            os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)


def _fetch_transcript(
    page_html: str, out_path: Path, transport: Transport
) -> tuple[TranscriptStatus, Optional[str], Optional[Path], Optional[str]]:
    """Locate and download the transcript; failures are reported, never raised."""
    transcript_url = transcript.find_transcript_url(page_html)
    if transcript_url is None:
        logger.warning("No transcript found for this episode.")
        return TranscriptStatus.NOT_FOUND, None, None, None

    logger.info("Transcript found: %s", transcript_url)
    try:
        downloader.download_to_file(transport, transcript_url, out_path)
    except ApplecastError as exc:
        logger.warning("Failed to download transcript: %s", exc)
        return TranscriptStatus.DOWNLOAD_FAILED, transcript_url, None, str(exc)

    logger.info("Transcript downloaded and saved to %s", out_path)
    return TranscriptStatus.DOWNLOADED, transcript_url, out_path, None


def run_pipeline(
    cfg: config.Config, *, transport: Optional[Transport] = None
) -> PipelineResult:
    """Run the episode pipeline for ``cfg.url``.

    Steps: validate the URL, fetch the page, save the HTML snapshot, extract
    and save metadata, then look for and download the transcript. Transcript
    problems are logged as warnings and reflected in the result only.

    Args:
        cfg: Run configuration.
        transport: Transport to use; an :class:`~applecast.downloader.HttpTransport`
            built from ``cfg`` is created (and closed) when omitted.

    Returns:
        PipelineResult describing the files written.

    Raises:
        InvalidUrlError: If the URL fails validation.
        FetchError: If the page cannot be fetched or returns a non-2xx status.
        StorageError: If the snapshot or metadata cannot be written.
        ExtractionError: If no metadata strategy could run.
    """
    url = validate_url(cfg.url or "")
    logger.info("Received URL: %s", url)

    try:
        output_dir = filesystem.resolve_output_dir(cfg.output_dir)
    except ValueError as exc:
        raise StorageError(str(exc), path=cfg.output_dir) from exc
    html_path = output_dir / HTML_SNAPSHOT_FILENAME
    metadata_path = output_dir / filesystem.metadata_filename(cfg.metadata_format)
    transcript_path = output_dir / TRANSCRIPT_FILENAME

    owns_transport = transport is None
    active_transport: Transport = transport or downloader.HttpTransport(
        user_agent=cfg.user_agent,
        timeout=cfg.timeout,
        max_redirects=cfg.max_redirects,
    )
    try:
        response = downloader.fetch_ok(active_transport, url, description="Fetching page")
        page_html = response.text
        filesystem.write_text(html_path, page_html)
        logger.info("Fetched HTML content and saved snapshot to %s", html_path)

        episode_metadata = metadata.extract_metadata(page_html)
        metadata.save_metadata(episode_metadata, metadata_path, cfg.metadata_format)
        logger.info("Metadata extracted and saved to %s", metadata_path)

        if cfg.skip_transcript:
            logger.info("Skipping transcript search")
            return PipelineResult(
                html_path=html_path,
                metadata_path=metadata_path,
                metadata=episode_metadata,
                transcript_status=TranscriptStatus.SKIPPED,
            )

        status, transcript_url, saved_path, error = _fetch_transcript(
            page_html, transcript_path, active_transport
        )
        return PipelineResult(
            html_path=html_path,
            metadata_path=metadata_path,
            metadata=episode_metadata,
            transcript_status=status,
            transcript_url=transcript_url,
            transcript_path=saved_path,
            transcript_error=error,
        )
    finally:
        if owns_transport:
            active_transport.close()
