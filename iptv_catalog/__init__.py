"""iptv-catalog: download, categorize and store IPTV playlists."""

__version__ = "0.1.0"
