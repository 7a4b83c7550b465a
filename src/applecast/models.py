from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EpisodeMetadata(BaseModel):
    """Episode metadata extracted from a podcast episode page.

    All fields are plain strings. An empty string means the value was not
    available on the page; it is not an error. ``publish_date`` is kept exactly
    as the page states it and is not parsed or validated.

    The model is immutable (frozen) once constructed and serializes to a JSON
    object with exactly the four keys below, in declaration order.

    Attributes:
        episode_title: Episode title.
        description: Episode description with inline markup removed.
        show_title: Title of the show (series) the episode belongs to.
        publish_date: Free-form publish date text (e.g. "2023-01-15").

    Example:
        >>> meta = EpisodeMetadata(
        ...     episode_title="Episode 1",
        ...     description="Introduction",
        ...     show_title="My Podcast",
        ...     publish_date="2023-01-15",
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    episode_title: str = Field(default="")
    description: str = Field(default="")
    show_title: str = Field(default="")
    publish_date: str = Field(default="")
