"""Path resolution for user-supplied targets.

Turns a possibly-relative path into the absolute, canonical form used
as the identity of a dropped entry.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _collapse_root(path: Path) -> Path:
    # pathlib keeps a leading "//" as a distinct root on POSIX
    if str(path).startswith("//"):
        return Path("/" + str(path).lstrip("/"))
    return path


def resolve_path(raw: str, cwd: Path | None = None) -> Path:
    """Resolve a user-supplied path to an absolute path.

    Relative paths are joined to ``cwd``. The parent directory is then
    canonicalized the way the kernel walks it, so ".." after a symlinked
    directory climbs out of the link target, and the same entry reached
    through different symlinked directories gets one identity. The final
    component is kept as named: a dropped symlink is the link itself, not
    its target. A final ".." names a directory and is resolved as a whole.

    If canonicalization fails (symlink loop, permission), the joined path
    with "." and ".." collapsed lexically is returned instead of raising.

    Args:
        raw: Path as typed by the user.
        cwd: Base for relative paths. Defaults to the process working directory.

    Returns:
        Absolute path.

    Raises:
        ValueError: If ``raw`` is empty.
    """
    if not raw:
        msg = "Path cannot be empty"
        raise ValueError(msg)

    candidate = Path(raw)
    if not candidate.is_absolute():
        candidate = (cwd if cwd is not None else Path.cwd()) / candidate
    candidate = _collapse_root(candidate)

    if candidate.parent == candidate:
        return candidate

    try:
        if candidate.name == "..":
            return candidate.resolve()
        return candidate.parent.resolve() / candidate.name
    except (OSError, RuntimeError) as e:
        fallback = _collapse_root(Path(os.path.normpath(candidate)))
        logger.debug("Cannot canonicalize %s, using %s: %s", raw, fallback, e)
        return fallback
