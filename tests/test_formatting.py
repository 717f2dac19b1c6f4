"""Tests for display helpers and the progress display."""

import asyncio
import io

import pytest
from rich.console import Console

from iptv_catalog.cli.progress_manager import ProgressManager
from iptv_catalog.models.catalog import Kind
from iptv_catalog.models.progress import RefreshState, RefreshStatus
from iptv_catalog.utils.formatting import format_duration, format_kind, format_size, truncate


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0 B"), (512, "512.0 B"), (1536, "1.5 KB"), (150 * 1024 * 1024, "150.0 MB")],
)
def test_format_size(size, expected) -> None:
    assert format_size(size) == expected


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0s"), (59.9, "59s"), (61, "1m 1s"), (3600, "1h"), (9252, "2h 34m 12s")],
)
def test_format_duration(seconds, expected) -> None:
    assert format_duration(seconds) == expected


def test_format_kind() -> None:
    assert format_kind(Kind.LIVE) == "[red]📺 live[/red]"
    assert format_kind("movie") == "[magenta]🎬 movie[/magenta]"
    assert format_kind("radio") == "radio"


def test_truncate() -> None:
    assert truncate("short", 10) == "short"
    assert truncate("a long channel name", 8) == "a long …"


def status(state, message, percent=None, success=False, in_progress=True):
    return RefreshStatus(success, in_progress, message, state, percent)


def test_progress_manager_tracks_stages() -> None:
    console = Console(file=io.StringIO(), force_terminal=False)
    manager = ProgressManager(console)

    async def scenario():
        async with manager:
            manager.on_progress(status(RefreshState.DOWNLOADING, "Fetching playlist..."))
            manager.on_progress(status(RefreshState.DOWNLOADING, "Downloading playlist: 50%", 50))
            manager.on_progress(status(RefreshState.PARSING, "Parsing playlist..."))
            manager.on_progress(
                status(RefreshState.COMPLETE, "Data refresh complete", 100, True, False)
            )

    asyncio.run(scenario())

    tasks = {task.fields["stage"].strip(): task for task in manager.progress.tasks}
    assert tasks["📥 Download"].completed == 100
    assert tasks["🧩 Parse"].completed == 100
    assert manager.final_status.success


def test_progress_manager_quiet_records_only() -> None:
    manager = ProgressManager(Console(file=io.StringIO()), quiet=True)

    manager.on_progress(status(RefreshState.FAILED, "boom", in_progress=False))

    assert manager.progress.tasks == []
    assert manager.final_status.message == "boom"


def test_progress_manager_marks_failed_stage() -> None:
    manager = ProgressManager(Console(file=io.StringIO(), force_terminal=False))

    async def scenario():
        async with manager:
            manager.on_progress(status(RefreshState.DOWNLOADING, "Fetching playlist..."))
            manager.on_progress(
                status(RefreshState.FAILED, "HTTP 503", in_progress=False)
            )

    asyncio.run(scenario())

    (task,) = manager.progress.tasks
    assert task.description == "[red]HTTP 503[/red]"
    assert task.completed == 0
    assert manager.final_status.state.is_terminal


def test_terminal_states() -> None:
    terminal = {state for state in RefreshState if state.is_terminal}

    assert terminal == {RefreshState.COMPLETE, RefreshState.FAILED}
