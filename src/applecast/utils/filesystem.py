"""Filesystem utilities for applecast."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from platformdirs import user_data_dir, user_documents_dir

from ..config_constants import METADATA_BASENAME
from ..exceptions import StorageError

logger = logging.getLogger(__name__)

_PLATFORMDIR_APP_NAMES = ("applecast", "applecast-cli")


def _platformdirs_safe_roots() -> set[Path]:
    """Return resolved platformdirs locations considered safe for outputs."""

    roots: set[Path] = set()
    for app_name in _PLATFORMDIR_APP_NAMES:
        try:
            location = user_data_dir(app_name)
        except (OSError, RuntimeError):
            continue
        if location:
            roots.add(Path(location).expanduser().resolve())
    try:
        roots.add(Path(user_documents_dir()).expanduser().resolve())
    except (OSError, RuntimeError):
        pass
    return roots


_PLATFORMDIR_SAFE_ROOTS = _platformdirs_safe_roots()


def resolve_output_dir(path: str) -> Path:
    """Validate an output directory path and return it absolute and normalized.

    Directories outside the working directory, the home directory and the
    platform data/documents locations are allowed but logged as a warning.

    Raises:
        ValueError: If the path is empty or cannot be resolved.
    """
    if not path or not path.strip():
        raise ValueError("Output directory path cannot be empty")

    try:
        resolved = Path(path).expanduser().resolve()
    except (OSError, RuntimeError) as exc:
        raise ValueError(f"Invalid output directory path: {path} ({exc})") from exc

    safe_roots = {Path.cwd().resolve(), Path.home().resolve(), *_PLATFORMDIR_SAFE_ROOTS}
    if not any(resolved == root or resolved.is_relative_to(root) for root in safe_roots):
        logger.warning(
            "Output directory %s is outside recommended locations (working dir or home).",
            resolved,
        )
    return resolved


def metadata_filename(metadata_format: str) -> str:
    """Return the metadata document file name for a format (``json`` or ``yaml``)."""
    return f"{METADATA_BASENAME}.{metadata_format}"


def write_file(path: str | Path, data: bytes) -> int:
    """Persist bytes to disk, creating parent directories as needed.

    Returns:
        Number of bytes written.

    Raises:
        StorageError: If the directory or file cannot be written.
    """
    try:
        os.makedirs(os.path.dirname(os.fspath(path)) or ".", exist_ok=True)
        with open(path, "wb") as handle:
            handle.write(data)
    except OSError as exc:
        raise StorageError(f"Failed to write to file {path}: {exc}", path=str(path)) from exc
    logger.debug("Wrote %d bytes to %s", len(data), path)
    return len(data)


def write_text(path: str | Path, text: str) -> int:
    """Persist UTF-8 text to disk; see :func:`write_file`."""
    return write_file(path, text.encode("utf-8"))
