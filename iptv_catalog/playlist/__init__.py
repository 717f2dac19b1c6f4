"""
Playlist Processing Layer.

This package is responsible for turning a remote extended playlist into
categories: streaming download, line-level parsing and kind inference.
"""

from .categorizer import categorize, infer_kind
from .downloader import PlaylistDownloader
from .parser import parse_playlist

__all__ = ["PlaylistDownloader", "categorize", "infer_kind", "parse_playlist"]
