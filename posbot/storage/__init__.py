"""Local persistence."""

from .drafts import LocalDraftStore

__all__ = ["LocalDraftStore"]
