"""
Statistics for a refresh run and the explicit session passed to the orchestrator.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime

from .catalog import Credentials


@dataclass
class RefreshStats:
    """Tracks what a single refresh downloaded, parsed and stored."""

    bytes_downloaded: int = 0
    entries_parsed: int = 0
    categories_saved: int = 0
    items_saved: int = 0
    stage_durations: dict[str, float] = field(default_factory=dict)
    _stage_started: float = field(default=0.0, repr=False)
    _stage_name: str | None = field(default=None, repr=False)

    def start_stage(self, name: str) -> None:
        self.end_stage()
        self._stage_name = name
        self._stage_started = time.monotonic()

    def end_stage(self) -> None:
        if self._stage_name is not None:
            self.stage_durations[self._stage_name] = (
                time.monotonic() - self._stage_started
            )
            self._stage_name = None

    @property
    def total_duration(self) -> float:
        return sum(self.stage_durations.values())


@dataclass
class Session:
    """
    Explicit session state shared between the orchestrator and its callers.

    Replaces any process-wide "logged in" flag: whoever drives a refresh owns
    the session and decides what to do with it afterwards.
    """

    credentials: Credentials | None = None
    last_update: datetime | None = None
    last_stats: RefreshStats | None = None

    @property
    def is_logged_in(self) -> bool:
        return self.credentials is not None
