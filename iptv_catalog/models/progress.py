"""
Progress events emitted by pipeline stages and the status stream of a refresh.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """
    Advisory progress from a single stage.

    `percent` is absent when unknown. `phase` names the counter the percent
    belongs to when a stage reports several in sequence (categories, then
    items); percents never decrease within one phase.
    """

    message: str
    percent: int | None = None
    phase: str | None = None


class RefreshState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    DOWNLOADING = "downloading"
    PARSING = "parsing"
    PERSISTING = "persisting"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RefreshState.COMPLETE, RefreshState.FAILED)


@dataclass(frozen=True)
class RefreshStatus:
    """The observer-facing status of a refresh pipeline."""

    success: bool
    in_progress: bool
    message: str
    state: RefreshState = RefreshState.IDLE
    percent: int | None = None


@runtime_checkable
class ProgressObserver(Protocol):
    def on_progress(self, event: Any) -> None: ...


# Either an object with `on_progress` or a plain callable
Observer = ProgressObserver | Callable[[Any], None]


def notify(observer: Observer | None, event: Any) -> None:
    """
    Delivers an event to an observer. Observer failures are logged and swallowed
    so that a broken progress display never aborts the pipeline.
    """
    if observer is None:
        return
    try:
        if isinstance(observer, ProgressObserver):
            observer.on_progress(event)
        else:
            observer(event)
    except Exception as e:
        log.debug(f"Progress observer raised {type(e).__name__}: {e}")
