"""Holding store: the flat directory of dropped entries.

The directory listing itself is the index. Each entry is one filesystem
object whose name is produced by the codec; anything else found in the
directory is treated as foreign and never touched by recover or purge.

Concurrent invocations are not synchronized. Two processes may race on
the same directory; the only guarantee is that one process never
overwrites an existing entry when allocating a new name.
"""

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

from dropctl.models.entry import DroppedEntry, ListedEntry
from dropctl.store.codec import decode, encode

logger = logging.getLogger(__name__)

ScanErrorHandler = Callable[[str, OSError], None]


class HoldingStoreError(RuntimeError):
    """Raised when the holding directory cannot be created or opened."""


class HoldingStore:
    """Flat directory of encoded entries.

    Attributes:
        root: Absolute path of the holding directory.
    """

    def __init__(self, root: Path) -> None:
        """Initialize the HoldingStore.

        Args:
            root: Holding directory. It is not created until ensure_exists().
        """
        self.root = root

    def ensure_exists(self) -> Path:
        """Create the holding directory if it doesn't exist.

        Returns:
            The holding directory path.

        Raises:
            HoldingStoreError: If the directory cannot be created, or a
                non-directory already occupies its path.
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except FileExistsError as e:
            msg = f"Cannot create holding directory {self.root}: not a directory"
            raise HoldingStoreError(msg) from e
        except PermissionError as e:
            msg = f"Cannot create holding directory {self.root}: Permission denied"
            raise HoldingStoreError(msg) from e
        except OSError as e:
            msg = f"Cannot create holding directory {self.root}: {e}"
            raise HoldingStoreError(msg) from e
        return self.root

    def path_for(self, stored_name: str) -> Path:
        """Absolute location of a stored entry."""
        return self.root / stored_name

    def overlaps(self, path: Path) -> bool:
        """Check if a path is the holding directory, lies inside it or contains it."""
        try:
            root = self.root.resolve()
        except (OSError, RuntimeError):
            root = self.root
        return path == root or root in path.parents or path in root.parents

    def scan(self, on_error: ScanErrorHandler | None = None) -> Iterator[str]:
        """Yield the names of all entries in the holding directory.

        Every call re-reads the directory. Entries that fail to stat are
        logged, reported through ``on_error`` and skipped.

        Args:
            on_error: Called with (name, exception) for each skipped entry.

        Yields:
            Stored names, in directory order.

        Raises:
            HoldingStoreError: If the directory itself cannot be read.
        """
        try:
            iterator = os.scandir(self.root)
        except OSError as e:
            msg = f"Cannot read holding directory {self.root}: {e}"
            raise HoldingStoreError(msg) from e

        with iterator:
            for dir_entry in iterator:
                try:
                    # lstat surfaces entries that vanished or cannot be accessed
                    dir_entry.stat(follow_symlinks=False)
                except OSError as e:
                    logger.warning("Skipping unreadable holding entry %s: %s", dir_entry.name, e)
                    if on_error is not None:
                        on_error(dir_entry.name, e)
                    continue
                yield dir_entry.name

    def entries(self, on_error: ScanErrorHandler | None = None) -> Iterator[ListedEntry]:
        """Yield every holding entry with its decoded form.

        Foreign names are included with ``entry=None``.
        """
        for name in self.scan(on_error):
            entry = decode(name)
            if entry is None:
                logger.debug("Foreign name in holding directory: %s", name)
            yield ListedEntry(stored_name=name, entry=entry)

    def locate(
        self,
        original_path: str,
        on_error: ScanErrorHandler | None = None,
    ) -> list[DroppedEntry]:
        """Find every stored entry dropped from ``original_path``.

        The same path may have been dropped several times, so all matches
        are returned, oldest first.

        Args:
            original_path: Absolute path to look up.
            on_error: Passed through to scan().

        Returns:
            Matching entries ordered by (timestamp, sequence).
        """
        matches = [
            listed.entry
            for listed in self.entries(on_error)
            if listed.entry is not None and listed.entry.original_path == original_path
        ]
        matches.sort(key=lambda e: e.sort_key)
        return matches

    def allocate(self, original_path: str, timestamp: int) -> str:
        """Choose a free stored name for a new drop.

        Tries sequence 0, 1, 2, ... until the encoded name is not already
        present, so dropping the same path twice within one second never
        overwrites the first entry.

        Args:
            original_path: Absolute path being dropped.
            timestamp: Drop time in seconds since the epoch.

        Returns:
            A stored name that does not exist yet.
        """
        sequence = 0
        while True:
            name = encode(timestamp, original_path, sequence)
            if not os.path.lexists(self.path_for(name)):
                return name
            logger.debug("Stored name %s taken, trying next sequence", name)
            sequence += 1
