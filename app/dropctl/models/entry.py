"""Holding store entry models.

This module defines the data structures for entries living in the
holding directory and for the per-entry outcome of an operation.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum


class Verb(str, Enum):
    """Operation requested by the user.

    Attributes:
        DROP: Move entries into the holding store.
        RECOVER: Move dropped entries back to their original location.
        PURGE: Permanently delete dropped entries.
        LIST: Show the contents of the holding store.
    """

    DROP = "drop"
    RECOVER = "recover"
    PURGE = "purge"
    LIST = "list"


@dataclass(frozen=True, slots=True)
class DroppedEntry:
    """A decoded holding store entry.

    Never persisted on its own; it is derived from the stored filename.

    Attributes:
        stored_name: Literal filename inside the holding directory.
        drop_timestamp: Seconds since the epoch when the entry was dropped.
        original_path: Absolute path of the entry at the time of the drop.
        sequence: Collision counter for drops of the same path within one second.
    """

    stored_name: str
    drop_timestamp: int
    original_path: str
    sequence: int = 0

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.stored_name:
            msg = "Stored name cannot be empty"
            raise ValueError(msg)
        if not self.original_path.startswith("/"):
            msg = f"Original path must be absolute, got '{self.original_path}'"
            raise ValueError(msg)
        if self.drop_timestamp < 0 or self.sequence < 0:
            msg = "Timestamp and sequence must be non-negative"
            raise ValueError(msg)

    @property
    def dropped_at(self) -> datetime:
        """Drop time as a timezone-aware datetime."""
        return datetime.fromtimestamp(self.drop_timestamp, tz=UTC)

    @property
    def sort_key(self) -> tuple[int, int, str]:
        """Chronological ordering key."""
        return (self.drop_timestamp, self.sequence, self.original_path)


@dataclass(frozen=True, slots=True)
class ListedEntry:
    """A raw holding store name paired with its decoded form.

    Attributes:
        stored_name: Literal filename inside the holding directory.
        entry: Decoded entry, or None when the name is foreign/unparseable.
    """

    stored_name: str
    entry: DroppedEntry | None = None

    @property
    def is_foreign(self) -> bool:
        """Check if the name could not be decoded."""
        return self.entry is None

    @property
    def display_path(self) -> str:
        """Original path, or the raw stored name for foreign entries."""
        if self.entry is None:
            return self.stored_name
        return self.entry.original_path


@dataclass(frozen=True, slots=True)
class EntryResult:
    """Result of a single drop, recover or purge step.

    Attributes:
        verb: Operation that produced this result.
        path: Path named in user-facing messages.
        success: Whether the step completed successfully.
        message: Success message, None on failure.
        error: Error message if the step failed, None otherwise.
        stored_name: Holding store name involved, when known.
    """

    verb: Verb
    path: str
    success: bool
    message: str | None = None
    error: str | None = None
    stored_name: str | None = None

    @property
    def failed(self) -> bool:
        """Check if the step failed."""
        return not self.success
