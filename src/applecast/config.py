from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from . import config_constants


def _is_test_environment() -> bool:
    """Check if we're running in a test environment."""
    if "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return os.environ.get("TESTING", "").lower() in ("1", "true", "yes")


# Tests configure through Config objects and environment variables, never .env files
if not _is_test_environment():
    try:
        load_dotenv(override=False)
    except (PermissionError, OSError):
        # Continue without .env file
        pass

DEFAULT_LOG_LEVEL = config_constants.DEFAULT_LOG_LEVEL
DEFAULT_OUTPUT_DIR = config_constants.DEFAULT_OUTPUT_DIR
DEFAULT_USER_AGENT = config_constants.DEFAULT_USER_AGENT
DEFAULT_TIMEOUT_SECONDS = config_constants.DEFAULT_TIMEOUT_SECONDS
DEFAULT_MAX_REDIRECTS = config_constants.DEFAULT_MAX_REDIRECTS
DEFAULT_METADATA_FORMAT = config_constants.DEFAULT_METADATA_FORMAT
MIN_TIMEOUT_SECONDS = config_constants.MIN_TIMEOUT_SECONDS
MAX_REDIRECTS_LIMIT = config_constants.MAX_REDIRECTS_LIMIT
VALID_LOG_LEVELS = config_constants.VALID_LOG_LEVELS
VALID_METADATA_FORMATS = config_constants.VALID_METADATA_FORMATS


class Config(BaseModel):
    """Configuration model for a single applecast run.

    Configuration can be created programmatically, built by the CLI from
    arguments, or loaded from JSON/YAML files using `load_config_file()`.

    The configuration is organized into a few categories:

    - **Source**: the episode page URL
    - **Output**: output directory and metadata document format
    - **HTTP**: user agent, timeout and redirect limit
    - **Processing**: whether to look for a transcript
    - **Logging**: log level and optional log file

    The model is immutable (frozen) after creation.

    Attributes:
        url: Episode page URL. Validated by the pipeline, not here, so an
            invalid URL is reported with the dedicated error.
        output_dir: Directory receiving the snapshot, metadata and transcript.
            Can be set via OUTPUT_DIR environment variable.
        user_agent: HTTP User-Agent header for requests.
        timeout: Request timeout in seconds; None disables the timeout.
        max_redirects: Maximum number of redirects followed per request.
        metadata_format: Format of the metadata document ("json" or "yaml").
        skip_transcript: Stop after saving metadata without searching for a transcript.
        log_level: Logging level name.
        log_file: Optional log file path. Can be set via LOG_FILE environment variable.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    url: Optional[str] = Field(default=None, alias="url")
    output_dir: str = Field(default=DEFAULT_OUTPUT_DIR, alias="output_dir")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, alias="user_agent")
    timeout: Optional[int] = Field(default=DEFAULT_TIMEOUT_SECONDS, alias="timeout")
    max_redirects: int = Field(default=DEFAULT_MAX_REDIRECTS, alias="max_redirects")
    metadata_format: Literal["json", "yaml"] = Field(
        default=DEFAULT_METADATA_FORMAT, alias="metadata_format"
    )
    skip_transcript: bool = Field(default=False, alias="skip_transcript")
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, alias="log_level")
    log_file: Optional[str] = Field(
        default=None,
        alias="log_file",
        description="Path to log file (logs will be written to both console and file). "
        "Can be set via LOG_FILE environment variable.",
    )

    @field_validator("url", mode="before")
    @classmethod
    def _strip_url(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value).strip()

    @field_validator("output_dir", mode="before")
    @classmethod
    def _load_output_dir_from_env(cls, value: Any) -> str:
        """Load output directory from environment variable if not provided."""
        if value is not None and str(value).strip():
            return str(value).strip()
        env_output_dir = (os.getenv("OUTPUT_DIR") or "").strip()
        return env_output_dir or DEFAULT_OUTPUT_DIR

    @field_validator("user_agent", mode="before")
    @classmethod
    def _coerce_user_agent(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_USER_AGENT
        return str(value).strip() or DEFAULT_USER_AGENT

    @field_validator("timeout", mode="before")
    @classmethod
    def _ensure_timeout(cls, value: Any) -> Optional[int]:
        if value is None or value == "":
            return None
        try:
            timeout = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("timeout must be an integer") from exc
        return max(MIN_TIMEOUT_SECONDS, timeout)

    @field_validator("max_redirects", mode="before")
    @classmethod
    def _ensure_max_redirects(cls, value: Any) -> int:
        if value is None or value == "":
            return DEFAULT_MAX_REDIRECTS
        try:
            redirects = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("max_redirects must be an integer") from exc
        if redirects < 0 or redirects > MAX_REDIRECTS_LIMIT:
            raise ValueError(
                f"max_redirects must be between 0 and {MAX_REDIRECTS_LIMIT}, got: {redirects}"
            )
        return redirects

    @field_validator("metadata_format", mode="before")
    @classmethod
    def _normalize_metadata_format(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_METADATA_FORMAT
        value_str = str(value).strip().lower()
        if value_str == "yml":
            return "yaml"
        return value_str or DEFAULT_METADATA_FORMAT

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        """Normalize log level value."""
        if value is None:
            return DEFAULT_LOG_LEVEL
        return str(value).strip().upper() or DEFAULT_LOG_LEVEL

    @field_validator("log_level", mode="after")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        """Validate log level is one of the valid levels."""
        if value not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}, got: {value}")
        return value

    @field_validator("log_file", mode="before")
    @classmethod
    def _load_log_file_from_env(cls, value: Any) -> Optional[str]:
        """Load log file path from environment variable if not provided."""
        if value is not None and str(value).strip():
            return str(value).strip()
        env_log_file = (os.getenv("LOG_FILE") or "").strip()
        return env_log_file or None

    @model_validator(mode="before")
    @classmethod
    def _preprocess_config_data(cls, data: Any) -> Any:
        """Fill omitted fields from environment variables before validation.

        Field validators do not run for defaulted fields, so OUTPUT_DIR and
        LOG_FILE are applied here when the key is missing or None.
        """
        if not isinstance(data, dict):
            return data

        data = dict(data)
        for field_name, env_name in (("output_dir", "OUTPUT_DIR"), ("log_file", "LOG_FILE")):
            if data.get(field_name) is not None:
                continue
            env_value = (os.getenv(env_name) or "").strip()
            if env_value:
                data[field_name] = env_value
        return data


def load_config_file(path: str) -> Dict[str, Any]:
    """Load configuration from a JSON or YAML file.

    The file format is auto-detected from the extension (`.json`, `.yaml` or
    `.yml`). The returned dictionary can be passed to `Config.model_validate`.

    Args:
        path: Path to configuration file. Supports tilde expansion.

    Returns:
        Dict[str, Any]: Configuration values keyed by `Config` field name.

    Raises:
        ValueError: If the path is empty, the file does not exist, cannot be
            read, has an unsupported extension, fails to parse, or does not
            contain a mapping at the top level.

    Example:
        >>> config_dict = load_config_file("applecast.yaml")
        >>> cfg = Config.model_validate(config_dict)

    Supported Formats:
        **JSON** (`.json`):

            {
              "url": "https://podcasts.apple.com/us/podcast/id840986946?i=1000631244436",
              "output_dir": "./episodes"
            }

        **YAML** (`.yaml`, `.yml`):

            url: https://podcasts.apple.com/us/podcast/id840986946?i=1000631244436
            output_dir: ./episodes
    """
    if not path:
        raise ValueError("Config path cannot be empty")

    cfg_path = Path(path).expanduser()
    try:
        resolved = cfg_path.resolve()
    except (OSError, RuntimeError) as exc:
        raise ValueError(f"Invalid config path: {path} ({exc})") from exc

    if not resolved.exists():
        raise ValueError(f"Config file not found: {resolved}")

    suffix = resolved.suffix.lower()
    try:
        text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Failed to read config file {resolved}: {exc}") from exc

    if suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON config file {resolved}: {exc}") from exc
    elif suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML config file {resolved}: {exc}") from exc
    else:
        raise ValueError(f"Unsupported config file type: {resolved.suffix}")

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping/object at the top level")

    return data
