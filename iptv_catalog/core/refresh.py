"""
Sequences the refresh pipeline and reports its state to an observer.
"""

import logging
from datetime import datetime

from iptv_catalog.api.auth import AccountValidator
from iptv_catalog.exceptions import IptvCatalogError
from iptv_catalog.models.catalog import Credentials
from iptv_catalog.models.progress import (
    Observer,
    ProgressEvent,
    RefreshState,
    RefreshStatus,
    notify,
)
from iptv_catalog.models.stats import RefreshStats, Session
from iptv_catalog.playlist.categorizer import categorize
from iptv_catalog.playlist.downloader import PlaylistDownloader
from iptv_catalog.playlist.parser import parse_playlist
from iptv_catalog.storage.account_store import AccountStore
from iptv_catalog.storage.persister import CatalogPersister
from iptv_catalog.utils.structured_logger import RefreshLogger, create_refresh_logger

log = logging.getLogger(__name__)

# Allowed forward transitions; FAILED is reachable from any non-terminal state
_TRANSITIONS = {
    RefreshState.IDLE: {RefreshState.VALIDATING, RefreshState.DOWNLOADING},
    RefreshState.VALIDATING: {RefreshState.DOWNLOADING},
    RefreshState.DOWNLOADING: {RefreshState.PARSING},
    RefreshState.PARSING: {RefreshState.PERSISTING},
    RefreshState.PERSISTING: {RefreshState.COMPLETE},
    RefreshState.COMPLETE: set(),
    RefreshState.FAILED: set(),
}

_STAGE_MESSAGES = {
    RefreshState.VALIDATING: "Verifying credentials...",
    RefreshState.DOWNLOADING: "Fetching playlist...",
    RefreshState.PARSING: "Parsing playlist...",
    RefreshState.PERSISTING: "Saving data to database...",
}


class RefreshOrchestrator:
    """
    Runs Validating -> Downloading -> Parsing -> Persisting -> Complete.

    Any stage failure moves straight to Failed and stops the pipeline; nothing
    is retried. Stage failures never escape `authenticate` or `refresh`: the
    caller always receives a final `RefreshStatus`.
    """

    def __init__(
        self,
        session: Session,
        validator: AccountValidator,
        downloader: PlaylistDownloader,
        persister: CatalogPersister,
        account_store: AccountStore,
        refresh_logger: RefreshLogger | None = None,
    ):
        self.session = session
        self._validator = validator
        self._downloader = downloader
        self._persister = persister
        self._account_store = account_store
        self._events = refresh_logger or create_refresh_logger()

        self.state = RefreshState.IDLE
        self.stats = RefreshStats()
        self._observer: Observer | None = None
        self._running = False

    async def authenticate(
        self, credentials: Credentials, observer: Observer | None = None
    ) -> RefreshStatus:
        """
        Verifies new credentials, stores them and runs a full refresh.
        """
        return await self._run(credentials, observer, validate=True)

    async def refresh(self, observer: Observer | None = None) -> RefreshStatus:
        """Refreshes the catalog for the already logged-in session."""
        if not self.session.is_logged_in:
            self._observer = observer
            self.state = RefreshState.IDLE
            return self._fail("Not logged in. Run 'iptv-catalog login' first.")
        return await self._run(self.session.credentials, observer, validate=False)

    def close(self) -> None:
        """Closes the structured event log, if one is open."""
        self._events.close()

    def _transition(self, new_state: RefreshState, percent: int | None = None) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Invalid refresh transition {self.state.value} -> {new_state.value}"
            )
        self._end_stage()
        self.state = new_state
        self.stats.start_stage(new_state.value)
        log.debug(f"Refresh state: {new_state.value}")
        self._emit(
            RefreshStatus(
                success=False,
                in_progress=True,
                message=_STAGE_MESSAGES[new_state],
                state=new_state,
                percent=percent,
            )
        )

    def _end_stage(self) -> None:
        previous = self.state
        self.stats.end_stage()
        if previous is not RefreshState.IDLE:
            self._events.stage_completed(
                previous.value, self.stats.stage_durations.get(previous.value, 0.0)
            )

    def _emit(self, status: RefreshStatus) -> None:
        notify(self._observer, status)

    def _forward(self, event: ProgressEvent) -> None:
        """Maps a stage progress event onto the status stream."""
        self._emit(
            RefreshStatus(
                success=False,
                in_progress=True,
                message=event.message,
                state=self.state,
                percent=event.percent,
            )
        )

    def _fail(self, message: str) -> RefreshStatus:
        self.stats.end_stage()
        self.state = RefreshState.FAILED
        status = RefreshStatus(
            success=False,
            in_progress=False,
            message=message,
            state=RefreshState.FAILED,
        )
        self._emit(status)
        return status

    async def _run(
        self, credentials: Credentials, observer: Observer | None, validate: bool
    ) -> RefreshStatus:
        if self._running:
            return RefreshStatus(
                success=False,
                in_progress=False,
                message="A refresh is already in progress.",
                state=RefreshState.FAILED,
            )

        self._running = True
        self._observer = observer
        self.state = RefreshState.IDLE
        self.stats = RefreshStats()
        self._events.refresh_started(credentials.server, credentials.username, validate)
        try:
            return await self._run_stages(credentials, validate)
        finally:
            self._running = False

    async def _run_stages(
        self, credentials: Credentials, validate: bool
    ) -> RefreshStatus:
        try:
            if validate:
                self._transition(RefreshState.VALIDATING)
                await self._validator.validate(credentials)
                await self._account_store.save(credentials)
                self.session.credentials = credentials

            self._transition(RefreshState.DOWNLOADING)
            text = await self._downloader.download(credentials, self._forward)
            self.stats.bytes_downloaded = self._downloader.bytes_received

            self._transition(RefreshState.PARSING)
            entries = parse_playlist(text)
            categories = categorize(entries)
            self.stats.entries_parsed = len(entries)
            log.info(
                f"Parsed {len(entries)} entries into {len(categories)} categories."
            )

            self._transition(RefreshState.PERSISTING)
            result = await self._persister.persist(categories, self._forward)
            self.stats.categories_saved = result.categories
            self.stats.items_saved = result.items
        except IptvCatalogError as e:
            return self._handle_failure(e)
        except Exception as e:
            log.error(f"Unexpected error during refresh: {e}", exc_info=True)
            return self._handle_failure(e)

        return self._complete()

    def _handle_failure(self, error: Exception) -> RefreshStatus:
        stage = self.state.value
        message = str(error) or type(error).__name__
        log.error(f"[red]Refresh failed while {stage}: {message}[/red]")
        self._events.refresh_failed(stage, type(error).__name__, message)
        return self._fail(message)

    def _complete(self) -> RefreshStatus:
        self._end_stage()
        self.state = RefreshState.COMPLETE
        self.session.last_update = datetime.now()
        self.session.last_stats = self.stats
        self._events.refresh_completed(
            self.stats.total_duration,
            self.stats.bytes_downloaded,
            self.stats.entries_parsed,
            self.stats.categories_saved,
            self.stats.items_saved,
        )
        status = RefreshStatus(
            success=True,
            in_progress=False,
            message="Data refresh complete",
            state=RefreshState.COMPLETE,
            percent=100,
        )
        self._emit(status)
        return status
