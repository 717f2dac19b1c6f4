"""
Structured logging system for better log analysis and debugging.
Provides JSON-formatted logs with context and metadata.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("iptv_catalog", log_dir=Path("logs"))
        logger.info("stage_completed", stage="downloading", duration_s=3.2)
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Enable console output
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            json_log_path = log_dir / f"iptv_catalog_{timestamp}.jsonl"
            self._json_file = open(json_log_path, "a", encoding="utf-8")  # noqa: SIM115
            self.json_log_path = json_log_path

        # Session context (added to all log entries)
        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    def _format_message(self, event: str, **context) -> str:
        parts = [f"[{event}]"]
        for key, value in context.items():
            parts.append(f"{key}={value}")
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except (OSError, TypeError, ValueError) as e:
            # Fallback to stderr if JSON logging fails
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _log(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            self._logger.log(level, self._format_message(event, **context))
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        self._log(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        self._log(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        self._log(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        self._log(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class RefreshLogger:
    """Specialized logger for refresh pipeline events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def refresh_started(self, server: str, username: str, validate: bool):
        self.logger.info(
            "refresh_started", server=server, username=username, validate=validate
        )

    def stage_completed(self, stage: str, duration_s: float, **details):
        self.logger.debug(
            "stage_completed", stage=stage, duration_s=round(duration_s, 3), **details
        )

    def refresh_completed(
        self,
        duration_s: float,
        bytes_downloaded: int,
        entries_parsed: int,
        categories: int,
        items: int,
    ):
        self.logger.info(
            "refresh_completed",
            duration_s=round(duration_s, 2),
            size_mb=round(bytes_downloaded / (1024 * 1024), 2),
            entries_parsed=entries_parsed,
            categories=categories,
            items=items,
        )

    def refresh_failed(self, stage: str, error_type: str, error: str):
        self.logger.error(
            "refresh_failed", stage=stage, error_type=error_type, error=error
        )

    def close(self) -> None:
        self.logger.close()


def create_refresh_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> RefreshLogger:
    """
    Create the refresh event logger.

    Console output is disabled: the CLI already renders the status stream, the
    structured events are meant for the JSONL file.
    """
    base = StructuredLogger(
        "iptv_catalog.events",
        log_dir=log_dir,
        enable_json=enable_json,
        enable_console=False,
    )
    return RefreshLogger(base)
