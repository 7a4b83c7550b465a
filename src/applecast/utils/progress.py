"""Pluggable progress reporting for downloads.

Library code reports progress through :func:`progress_context`; by default
nothing is displayed. The CLI registers a tqdm-backed factory with
:func:`set_progress_factory` so interactive runs show a progress bar.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, Optional, Protocol


class ProgressReporter(Protocol):
    """Minimal interface for progress callbacks."""

    def update(self, advance: int) -> None: ...


# (total bytes or None when unknown, description) -> reporter context
ProgressFactory = Callable[[Optional[int], str], ContextManager[ProgressReporter]]


class _SilentProgress:
    def update(self, advance: int) -> None:
        return None


@contextmanager
def _silent_progress(total: Optional[int], description: str) -> Iterator[ProgressReporter]:
    yield _SilentProgress()


_progress_factory: ProgressFactory = _silent_progress


def set_progress_factory(factory: Optional[ProgressFactory]) -> None:
    """Register the factory used for progress reporters; ``None`` restores silence."""
    global _progress_factory
    _progress_factory = factory or _silent_progress


@contextmanager
def progress_context(total: Optional[int], description: str) -> Iterator[ProgressReporter]:
    """Yield a reporter from the active factory."""
    with _progress_factory(total, description) as reporter:
        yield reporter
