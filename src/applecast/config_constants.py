"""Configuration constants for applecast.

All constants are re-exported from config.py for convenience.
"""

# General defaults
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
# No request timeout unless one is configured explicitly
DEFAULT_TIMEOUT_SECONDS = None
DEFAULT_MAX_REDIRECTS = 10
DEFAULT_METADATA_FORMAT = "json"

# Output file names inside the output directory
HTML_SNAPSHOT_FILENAME = "episode.html"
METADATA_BASENAME = "metadata"
TRANSCRIPT_FILENAME = "transcript.ttml"

# Validation ranges
MIN_TIMEOUT_SECONDS = 1
MAX_REDIRECTS_LIMIT = 50
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_METADATA_FORMATS = ("json", "yaml")
ALLOWED_URL_SCHEMES = ("http", "https")
