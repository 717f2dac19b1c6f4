"""
Data Models Layer.

This package contains the dataclasses and Pydantic models that define the core
data structures used throughout the application: catalog entries, account
snapshots, progress events, configuration and refresh statistics.
"""

from .account import AccountInfo, ServerInfo, UserInfo
from .catalog import Category, Credentials, Item, Kind, RawEntry
from .config import AppConfig
from .progress import ProgressEvent, RefreshState, RefreshStatus
from .stats import RefreshStats, Session

__all__ = [
    "AccountInfo",
    "AppConfig",
    "Category",
    "Credentials",
    "Item",
    "Kind",
    "ProgressEvent",
    "RawEntry",
    "RefreshState",
    "RefreshStats",
    "RefreshStatus",
    "ServerInfo",
    "Session",
    "UserInfo",
]
