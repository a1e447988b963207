"""Stored-name codec for the holding directory.

Maps (timestamp, sequence, absolute path) to a single flat filename and
back. The layout is:

    {timestamp}_{escaped_path}
    {timestamp}.{sequence}_{escaped_path}   (sequence > 0)

A filename cannot contain "/", so the path is stored verbatim apart from
two escapes: "%" -> "%25" and "/" -> "%2F". The head before the first
"_" is purely numeric, so splitting at the first separator is always
correct even when the path itself contains "_".
"""

import re

from dropctl.models.entry import DroppedEntry

SEPARATOR = "_"

_HEAD_RE = re.compile(r"^(?P<timestamp>\d+)(?:\.(?P<sequence>\d+))?$")
_ESCAPE_RE = re.compile(r"%(25|2F)")
_UNESCAPED = {"25": "%", "2F": "/"}


def escape_path(path: str) -> str:
    """Make an absolute path safe to use as a single filename."""
    return path.replace("%", "%25").replace("/", "%2F")


def unescape_path(escaped: str) -> str:
    """Exact inverse of escape_path."""
    return _ESCAPE_RE.sub(lambda m: _UNESCAPED[m.group(1)], escaped)


def encode(timestamp: int, path: str, sequence: int = 0) -> str:
    """Build the stored name for a dropped entry.

    Args:
        timestamp: Drop time in seconds since the epoch.
        path: Absolute original path.
        sequence: Collision counter; 0 is omitted from the name.

    Returns:
        Flat filename for the holding directory.

    Raises:
        ValueError: If the path is not absolute or a number is negative.
    """
    if not path.startswith("/"):
        msg = f"Path must be absolute, got '{path}'"
        raise ValueError(msg)
    if timestamp < 0 or sequence < 0:
        msg = "Timestamp and sequence must be non-negative"
        raise ValueError(msg)

    head = str(timestamp) if sequence == 0 else f"{timestamp}.{sequence}"
    return f"{head}{SEPARATOR}{escape_path(path)}"


def decode(stored_name: str) -> DroppedEntry | None:
    """Parse a stored name back into a DroppedEntry.

    Args:
        stored_name: Filename found in the holding directory.

    Returns:
        The decoded entry, or None if the name was not produced by encode().
    """
    head, sep, escaped = stored_name.partition(SEPARATOR)
    if not sep:
        return None

    match = _HEAD_RE.match(head)
    if match is None:
        return None

    original_path = unescape_path(escaped)
    if not original_path.startswith("/"):
        return None

    timestamp = int(match.group("timestamp"))
    sequence = int(match.group("sequence") or 0)
    # Stray "%" escapes or zero-padded numbers would not round-trip
    if encode(timestamp, original_path, sequence) != stored_name:
        return None

    return DroppedEntry(
        stored_name=stored_name,
        drop_timestamp=timestamp,
        original_path=original_path,
        sequence=sequence,
    )
