"""Data models for dropctl.

This module exports the request, entry and result models.
"""

from dropctl.models.entry import DroppedEntry, EntryResult, ListedEntry, Verb
from dropctl.models.request import Request, RequestError

__all__ = [
    "DroppedEntry",
    "EntryResult",
    "ListedEntry",
    "Request",
    "RequestError",
    "Verb",
]
