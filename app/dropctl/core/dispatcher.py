"""Operation dispatch for drop, recover, purge and list.

Each verb is a single synchronous pass over the requested paths, in the
order given. Failures are converted into EntryResult objects where they
happen and the batch carries on with the next entry. Only a holding
store that cannot be read at all (HoldingStoreError) escapes.
"""

import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from dropctl.core.resolver import resolve_path
from dropctl.models.entry import DroppedEntry, EntryResult, ListedEntry, Verb
from dropctl.models.request import Request
from dropctl.store.holding import HoldingStore
from dropctl.store.relocation import RelocationError, purge, relocate

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BatchOutcome:
    """Everything produced by one request.

    Attributes:
        verb: Operation that was run.
        results: Per-entry results, in processing order.
        listing: Holding store contents (list operation only).
    """

    verb: Verb
    results: list[EntryResult] = field(default_factory=lambda: [])
    listing: list[ListedEntry] = field(default_factory=lambda: [])

    @property
    def failed(self) -> bool:
        """Check if any entry failed."""
        return any(r.failed for r in self.results)


def _listing_key(listed: ListedEntry) -> tuple[int, int, int, str]:
    if listed.entry is None:
        return (1, 0, 0, listed.stored_name)
    return (0, *listed.entry.sort_key)


class Dispatcher:
    """Runs requests against a holding store.

    Attributes:
        store: The holding store acted upon.
    """

    def __init__(
        self,
        store: HoldingStore,
        clock: Callable[[], float] = time.time,
        cwd: Path | None = None,
    ) -> None:
        """Initialize the Dispatcher.

        Args:
            store: Holding store, already created with ensure_exists().
            clock: Source of the current time in seconds since the epoch.
            cwd: Base for relative paths. Defaults to the process working directory.
        """
        self.store = store
        self._clock = clock
        self._cwd = cwd

    def run(self, request: Request) -> BatchOutcome:
        """Execute a validated request.

        Raises:
            HoldingStoreError: If the holding directory cannot be read.
        """
        outcome = BatchOutcome(verb=request.verb)
        if request.verb == Verb.DROP:
            outcome.results = self.drop(list(request.paths))
        elif request.verb == Verb.RECOVER:
            outcome.results = self.recover(list(request.paths))
        elif request.verb == Verb.PURGE:
            outcome.results = self.purge(list(request.paths))
        else:
            outcome.listing, outcome.results = self.list_entries()
        return outcome

    # === Verbs ===

    def drop(self, paths: list[str]) -> list[EntryResult]:
        """Move each path into the holding store.

        All entries of one batch share a single drop timestamp.
        """
        now = int(self._clock())
        results: list[EntryResult] = []

        for raw in paths:
            target = self._resolve(raw, Verb.DROP, results)
            if target is None:
                continue

            if not os.path.lexists(target):
                results.append(_failure(Verb.DROP, target, f"File not found: {target}"))
                continue

            if self.store.overlaps(target):
                results.append(
                    _failure(
                        Verb.DROP,
                        target,
                        f"Cannot drop {target}: it overlaps the holding directory",
                    )
                )
                continue

            try:
                stored_name = self.store.allocate(str(target), now)
                relocate(target, self.store.path_for(stored_name))
            except (OSError, RelocationError) as e:
                results.append(_failure(Verb.DROP, target, f"Failed to drop {target}: {e}"))
                continue

            logger.info("Dropped %s as %s", target, stored_name)
            results.append(
                EntryResult(
                    verb=Verb.DROP,
                    path=str(target),
                    success=True,
                    message=f"Dropped: {target}",
                    stored_name=stored_name,
                )
            )

        return results

    def recover(self, paths: list[str]) -> list[EntryResult]:
        """Move every dropped entry matching each path back into place.

        An entry is never restored over an existing file; matches are
        tried oldest first.
        """
        results: list[EntryResult] = []
        on_error = self._scan_error_collector(results, Verb.RECOVER)

        for raw in paths:
            target = self._resolve(raw, Verb.RECOVER, results)
            if target is None:
                continue

            matches = self.store.locate(str(target), on_error)
            if not matches:
                results.append(
                    _failure(Verb.RECOVER, target, f"No dropped entry found for {target}")
                )
                continue

            for entry in matches:
                results.append(self._recover_entry(entry))

        return results

    def purge(self, paths: list[str]) -> list[EntryResult]:
        """Permanently delete every dropped entry matching each path."""
        results: list[EntryResult] = []
        on_error = self._scan_error_collector(results, Verb.PURGE)

        for raw in paths:
            target = self._resolve(raw, Verb.PURGE, results)
            if target is None:
                continue

            matches = self.store.locate(str(target), on_error)
            if not matches:
                results.append(
                    _failure(Verb.PURGE, target, f"No dropped entry found for {target}")
                )
                continue

            for entry in matches:
                results.append(self._purge_entry(entry))

        return results

    def list_entries(self) -> tuple[list[ListedEntry], list[EntryResult]]:
        """Read the holding store.

        Returns:
            Tuple of (entries sorted oldest first with foreign names last,
            failure results for entries that could not be read).
        """
        errors: list[EntryResult] = []
        on_error = self._scan_error_collector(errors, Verb.LIST)
        listing = sorted(self.store.entries(on_error), key=_listing_key)
        return listing, errors

    # === Private helpers ===

    def _recover_entry(self, entry: DroppedEntry) -> EntryResult:
        original = Path(entry.original_path)
        stored = self.store.path_for(entry.stored_name)

        if os.path.lexists(original):
            return _failure(
                Verb.RECOVER,
                original,
                f"File already exists: {original}",
                entry.stored_name,
            )

        try:
            original.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return _failure(
                Verb.RECOVER,
                original,
                f"Failed to create directories for {original}: {e}",
                entry.stored_name,
            )

        try:
            relocate(stored, original)
        except (OSError, RelocationError) as e:
            return _failure(
                Verb.RECOVER,
                original,
                f"Failed to recover {original}: {e}",
                entry.stored_name,
            )

        logger.info("Recovered %s from %s", original, entry.stored_name)
        return EntryResult(
            verb=Verb.RECOVER,
            path=str(original),
            success=True,
            message=f"Recovered: {original}",
            stored_name=entry.stored_name,
        )

    def _purge_entry(self, entry: DroppedEntry) -> EntryResult:
        stored = self.store.path_for(entry.stored_name)
        try:
            purge(stored)
        except OSError as e:
            return _failure(
                Verb.PURGE,
                Path(entry.original_path),
                f"Failed to delete {stored}: {e}",
                entry.stored_name,
            )

        logger.info("Purged %s", entry.stored_name)
        return EntryResult(
            verb=Verb.PURGE,
            path=entry.original_path,
            success=True,
            message=f"Permanently deleted: {entry.original_path}",
            stored_name=entry.stored_name,
        )

    def _resolve(self, raw: str, verb: Verb, results: list[EntryResult]) -> Path | None:
        try:
            return resolve_path(raw, self._cwd)
        except ValueError as e:
            results.append(EntryResult(verb=verb, path=raw, success=False, error=str(e)))
            return None

    def _scan_error_collector(
        self, results: list[EntryResult], verb: Verb
    ) -> Callable[[str, OSError], None]:
        """Build a scan error handler that reports each bad entry once per batch."""
        seen: set[str] = set()

        def collect(name: str, error: OSError) -> None:
            if name in seen:
                return
            seen.add(name)
            results.append(
                EntryResult(
                    verb=verb,
                    path=str(self.store.path_for(name)),
                    success=False,
                    error=f"Skipped unreadable holding entry {name}: {error}",
                    stored_name=name,
                )
            )

        return collect


def _failure(
    verb: Verb,
    path: Path | str,
    error: str,
    stored_name: str | None = None,
) -> EntryResult:
    logger.debug("%s failed for %s: %s", verb.value, path, error)
    return EntryResult(
        verb=verb,
        path=str(path),
        success=False,
        error=error,
        stored_name=stored_name,
    )
