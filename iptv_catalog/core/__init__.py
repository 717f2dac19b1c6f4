"""
Core application engine for orchestrating a catalog refresh.

The `RefreshOrchestrator` drives account validation, the playlist download,
parsing and categorization, and the replace-all write to storage in strict
sequence, turning every stage's progress into one status stream.
"""

from .refresh import RefreshOrchestrator

__all__ = ["RefreshOrchestrator"]
