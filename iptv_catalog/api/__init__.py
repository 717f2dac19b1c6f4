"""
Xtream API Layer.

This package handles all communication with the remote IPTV server: the
player API used to verify accounts and the playlist endpoint.
"""

from .auth import AccountValidator
from .client import XtreamClient

__all__ = ["AccountValidator", "XtreamClient"]
