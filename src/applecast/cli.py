"""Command-line interface for applecast."""

from __future__ import annotations

import argparse
import logging
from contextlib import contextmanager
from typing import Any, Callable, cast, Dict, Iterator, List, Optional, Sequence, TYPE_CHECKING

from pydantic import ValidationError

from . import __version__, config, workflow
from .exceptions import ApplecastError, InvalidUrlError
from .utils import filesystem, progress
from .utils.url_validation import validate_url

if TYPE_CHECKING:  # pragma: no cover - typing only
    import tqdm

_LOGGER = logging.getLogger(__name__)

# Progress bar constants
TQDM_NCOLS = 80
TQDM_MIN_INTERVAL = 0.5
BYTES_PER_KB = 1024


class _TqdmProgress:
    """Simple adapter that exposes tqdm's update interface."""

    def __init__(self, bar: "tqdm.tqdm") -> None:
        self._bar = bar

    def update(self, advance: int) -> None:
        self._bar.update(advance)


@contextmanager
def _tqdm_progress(total: Optional[int], description: str) -> Iterator[_TqdmProgress]:
    """Create a tqdm progress context matching the shared progress API."""
    from tqdm import tqdm

    kwargs: Dict[str, Any] = {
        "desc": description,
        "total": total,
        "unit": "B",
        "unit_scale": True,
        "unit_divisor": BYTES_PER_KB,
        "leave": False,
        "mininterval": TQDM_MIN_INTERVAL,
        "ncols": TQDM_NCOLS,
    }
    with tqdm(**kwargs) as bar:
        yield _TqdmProgress(bar)


def _validate_url(url_value: str, errors: List[str]) -> None:
    """Validate the episode URL.

    Args:
        url_value: URL string
        errors: List to append validation errors to
    """
    if not url_value:
        errors.append("URL is required (provide it as an argument or as 'url' in --config)")
        return
    try:
        validate_url(url_value)
    except InvalidUrlError as exc:
        errors.append(str(exc))


def validate_args(args: argparse.Namespace) -> None:
    """Validate parsed CLI arguments and raise ValueError when invalid."""
    errors: List[str] = []

    _validate_url((args.url or "").strip(), errors)

    if args.timeout is not None and args.timeout <= 0:
        errors.append(f"--timeout must be positive, got: {args.timeout}")

    if args.max_redirects < 0:
        errors.append(f"--max-redirects must be non-negative, got: {args.max_redirects}")

    if args.output_dir:
        try:
            filesystem.resolve_output_dir(args.output_dir)
        except ValueError as exc:
            errors.append(str(exc))

    if errors:
        raise ValueError("Invalid input parameters:\n  " + "\n  ".join(errors))


def _add_arguments(parser: argparse.ArgumentParser) -> None:
    """Add all arguments to parser.

    Args:
        parser: Argument parser to add arguments to
    """
    parser.add_argument("url", nargs="?", default=None, help="Podcast episode page URL")
    parser.add_argument("--config", default=None, help="Path to configuration file (JSON or YAML)")
    parser.add_argument(
        "--output-dir",
        default=None,
        help=f"Output directory (default: {config.DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument("--user-agent", default=config.DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument(
        "--timeout",
        type=int,
        default=config.DEFAULT_TIMEOUT_SECONDS,
        help="Request timeout in seconds (default: no timeout)",
    )
    parser.add_argument(
        "--max-redirects",
        type=int,
        default=config.DEFAULT_MAX_REDIRECTS,
        help=f"Maximum redirects to follow (default: {config.DEFAULT_MAX_REDIRECTS})",
    )
    parser.add_argument(
        "--metadata-format",
        choices=list(config.VALID_METADATA_FORMATS),
        default=config.DEFAULT_METADATA_FORMAT,
        help="Format for the metadata file (default: json)",
    )
    parser.add_argument(
        "--skip-transcript",
        action="store_true",
        help="Save page and metadata only; do not look for a transcript",
    )
    parser.add_argument("--version", action="store_true", help="Show program version and exit")
    parser.add_argument(
        "--log-file",
        default=None,
        help="Path to log file (logs will be written to both console and file)",
    )
    parser.add_argument(
        "--log-level",
        default=config.DEFAULT_LOG_LEVEL,
        type=str.upper,
        help="Logging level (e.g., DEBUG, INFO)",
    )


def _load_and_merge_config(
    parser: argparse.ArgumentParser, config_path: str, argv: Optional[Sequence[str]]
) -> argparse.Namespace:
    """Load configuration file and merge with CLI arguments.

    Values given on the command line win over values from the file.

    Raises:
        ValueError: If the config file is invalid or has unknown keys
    """
    config_data = config.load_config_file(config_path)
    valid_dests = {action.dest for action in parser._actions if action.dest}
    unknown_keys = [key for key in config_data.keys() if key not in valid_dests]
    if unknown_keys:
        raise ValueError("Unknown config option(s): " + ", ".join(sorted(unknown_keys)))

    try:
        config_model = config.Config.model_validate(config_data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc

    defaults_updates: Dict[str, Any] = config_model.model_dump(
        exclude_none=True,
        by_alias=True,
    )
    parser.set_defaults(**defaults_updates)
    return parser.parse_args(argv)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments, optionally merging configuration file defaults."""
    parser = argparse.ArgumentParser(
        prog="applecast-cli",
        description="Fetch a podcast episode page, save its metadata and download its transcript.",
    )
    _add_arguments(parser)

    initial_args, _ = parser.parse_known_args(argv)

    if initial_args.version:
        print(f"applecast {__version__}")
        raise SystemExit(0)

    if initial_args.config:
        args = _load_and_merge_config(parser, initial_args.config, argv)
    else:
        args = parser.parse_args(argv)

    validate_args(args)
    return args


def _build_config(args: argparse.Namespace) -> config.Config:
    """Materialize a Config object from already-validated CLI arguments."""
    payload: Dict[str, Any] = {
        "url": args.url,
        "output_dir": args.output_dir,
        "user_agent": args.user_agent,
        "timeout": args.timeout,
        "max_redirects": args.max_redirects,
        "metadata_format": args.metadata_format,
        "skip_transcript": args.skip_transcript,
        "log_level": args.log_level,
        "log_file": args.log_file,
    }
    return cast(config.Config, config.Config.model_validate(payload))


def _log_configuration(cfg: config.Config, logger: logging.Logger) -> None:
    """Log configuration values at debug level.

    Args:
        cfg: Configuration object
        logger: Logger instance to use
    """
    logger.debug("Configuration:")
    logger.debug(f"  URL: {cfg.url}")
    logger.debug(f"  Output Directory: {cfg.output_dir}")
    logger.debug(f"  Metadata Format: {cfg.metadata_format}")
    logger.debug(f"  Skip Transcript: {cfg.skip_transcript}")
    logger.debug(f"  Timeout: {cfg.timeout if cfg.timeout is not None else 'none'}")
    logger.debug(f"  Max Redirects: {cfg.max_redirects}")
    logger.debug(
        f"  User-Agent: {cfg.user_agent[:50]}..."
        if len(cfg.user_agent) > 50
        else f"  User-Agent: {cfg.user_agent}"
    )
    logger.debug(f"  Log Level: {cfg.log_level}")
    logger.debug(f"  Log File: {cfg.log_file or 'console only'}")


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    apply_log_level_fn: Optional[Callable[[str, Optional[str]], None]] = None,
    run_pipeline_fn: Optional[Callable[[config.Config], workflow.PipelineResult]] = None,
    logger: Optional[logging.Logger] = None,
) -> int:
    """Entry point for the CLI; returns an exit status code."""
    progress.set_progress_factory(_tqdm_progress)
    log = logger or _LOGGER
    if apply_log_level_fn is None:
        apply_log_level_fn = workflow.apply_log_level
    if run_pipeline_fn is None:
        run_pipeline_fn = workflow.run_pipeline

    try:
        args = parse_args(argv)
    except ValueError as exc:
        log.error(f"Error: {exc}")
        return 1

    try:
        cfg = _build_config(args)
    except ValidationError as exc:
        log.error(f"Invalid configuration: {exc}")
        return 1

    try:
        apply_log_level_fn(cfg.log_level, cfg.log_file)
    except (ValueError, OSError) as exc:
        log.error(f"Error: could not configure logging: {exc}")
        return 1

    _log_configuration(cfg, log)

    try:
        result = run_pipeline_fn(cfg)
    except ApplecastError as exc:
        log.error(f"Error: {exc}")
        return 1
    except Exception as exc:  # pragma: no cover
        log.error(f"Unexpected failure: {exc}")
        return 1

    log.info(result.summary)
    return 0


if __name__ == "__main__":  # pragma: no cover - script entry
    raise SystemExit(main())
