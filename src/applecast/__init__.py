"""applecast - Save podcast episode metadata and transcripts from episode pages.

Given an episode page URL, applecast:
- Saves an HTML snapshot of the page
- Extracts episode title, description, show title and publish date
  (episode schema JSON first, ``<meta>`` tags as fallback)
- Downloads the episode transcript when the page links one

Programmatic API Example:
    >>> import applecast
    >>>
    >>> cfg = applecast.Config(
    ...     url="https://podcasts.apple.com/us/podcast/id840986946?i=1000631244436",
    ...     output_dir="./output",
    ... )
    >>> result = applecast.run_pipeline(cfg)
    >>> print(result.metadata.episode_title)

CLI Usage:
    $ applecast-cli https://podcasts.apple.com/us/podcast/id840986946?i=1000631244436
    $ python -m applecast.cli --config config.yaml
"""

from __future__ import annotations

__version__ = "0.3.0"

from .config import Config, load_config_file  # noqa: E402
from .metadata import extract_metadata  # noqa: E402
from .models import EpisodeMetadata  # noqa: E402
from .transcript import find_transcript_url  # noqa: E402
from .workflow import PipelineResult, run_pipeline, TranscriptStatus  # noqa: E402

__all__ = [
    "Config",
    "EpisodeMetadata",
    "PipelineResult",
    "TranscriptStatus",
    "extract_metadata",
    "find_transcript_url",
    "load_config_file",
    "run_pipeline",
    "__version__",
]
