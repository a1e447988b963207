"""Relocation engine: move, copy and permanently delete filesystem entries.

Moves are attempted with a single atomic rename. When source and
destination live on different filesystems (EXDEV) the move falls back to
an explicit protocol:

1. copy the tree to the destination,
2. verify the copy against the source,
3. delete the source.

The original is never lost: a failed copy or verification discards the
partial destination, and a failed source deletion restores whatever was
already deleted from the copy before the copy is discarded.

Copying, verification, restoration and purging all share walk_tree().
"""

import errno
import logging
import os
import shutil
import stat
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class RelocationError(Exception):
    """Raised when a cross-device move cannot be completed safely."""


class NodeKind(str, Enum):
    """Type of a node in a walked tree.

    Attributes:
        DIRECTORY: Real directory (never a symlink to one).
        FILE: Regular file.
        SYMLINK: Symbolic link, live or dead; never followed.
        OTHER: Sockets, FIFOs and device nodes.
    """

    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class TreeNode:
    """One node yielded by walk_tree().

    Attributes:
        path: Absolute location of the node.
        relative: Location relative to the walked root (Path() for the root).
        kind: Type of the node.
        size: Size in bytes for regular files, 0 otherwise.
    """

    path: Path
    relative: Path
    kind: NodeKind
    size: int = 0


def _node(path: Path, relative: Path) -> TreeNode:
    st = os.lstat(path)
    if stat.S_ISLNK(st.st_mode):
        return TreeNode(path, relative, NodeKind.SYMLINK)
    if stat.S_ISDIR(st.st_mode):
        return TreeNode(path, relative, NodeKind.DIRECTORY)
    if stat.S_ISREG(st.st_mode):
        return TreeNode(path, relative, NodeKind.FILE, st.st_size)
    return TreeNode(path, relative, NodeKind.OTHER)


def _walk(node: TreeNode, topdown: bool) -> Iterator[TreeNode]:
    if node.kind != NodeKind.DIRECTORY:
        yield node
        return

    if topdown:
        yield node

    # Read names up front so no directory handle stays open while recursing
    with os.scandir(node.path) as it:
        names = sorted(entry.name for entry in it)

    for name in names:
        yield from _walk(_node(node.path / name, node.relative / name), topdown)

    if not topdown:
        yield node


def walk_tree(root: Path, topdown: bool = True) -> Iterator[TreeNode]:
    """Walk a file or directory tree without following symlinks.

    Args:
        root: File, symlink or directory to walk.
        topdown: Yield directories before their contents (copy order) when
            True, after them (delete order) when False.

    Yields:
        TreeNode for the root and every entry below it, siblings sorted by name.

    Raises:
        OSError: If any node cannot be stat'ed or any directory cannot be read.
    """
    yield from _walk(_node(root, Path()), topdown)


def copy_tree(src: Path, dst: Path, skip_existing: bool = False) -> None:
    """Recreate the tree at ``src`` under ``dst``.

    Files are copied byte for byte, directories recreated entry by entry
    and symlinks recreated as links.

    Args:
        src: Tree to copy.
        dst: Destination path. Must not exist unless ``skip_existing`` is set.
        skip_existing: Leave nodes already present at the destination alone.

    Raises:
        OSError: If any node cannot be read or written.
        RelocationError: If the tree contains an unsupported file type.
    """
    for node in walk_tree(src, topdown=True):
        target = dst / node.relative
        if skip_existing and os.path.lexists(target):
            continue

        if node.kind == NodeKind.DIRECTORY:
            os.mkdir(target)
        elif node.kind == NodeKind.FILE:
            if os.path.lexists(target):
                raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), str(target))
            shutil.copy2(node.path, target, follow_symlinks=False)
        elif node.kind == NodeKind.SYMLINK:
            os.symlink(os.readlink(node.path), target)
        else:
            msg = f"Cannot copy special file {node.path}"
            raise RelocationError(msg)

        logger.debug("Copied %s -> %s", node.path, target)


def verify_copy(src: Path, dst: Path) -> None:
    """Check that ``dst`` mirrors ``src``.

    Compares relative layout, node types, file sizes and link targets.

    Raises:
        OSError: If either tree cannot be walked.
        RelocationError: If the trees differ.
    """

    def signature(root: Path) -> list[tuple[Path, NodeKind, int, str | None]]:
        return [
            (
                node.relative,
                node.kind,
                node.size,
                os.readlink(node.path) if node.kind == NodeKind.SYMLINK else None,
            )
            for node in walk_tree(root)
        ]

    if signature(src) != signature(dst):
        msg = f"Copy of {src} at {dst} does not match the original"
        raise RelocationError(msg)


def remove_tree(path: Path) -> None:
    """Delete a file, symlink or directory tree, deepest entries first.

    Raises:
        OSError: If any node cannot be removed. Nodes removed before the
            failure stay removed.
    """
    for node in walk_tree(path, topdown=False):
        if node.kind == NodeKind.DIRECTORY:
            os.rmdir(node.path)
        else:
            os.unlink(node.path)
        logger.debug("Removed %s", node.path)


def purge(path: Path) -> None:
    """Permanently delete an entry. There is no way back.

    Args:
        path: File, symlink or directory to delete.

    Raises:
        FileNotFoundError: If nothing exists at ``path``.
        OSError: If deletion fails.
    """
    if not os.path.lexists(path):
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path))
    remove_tree(path)


def _discard(path: Path) -> None:
    """Best-effort removal of an incomplete copy."""
    if not os.path.lexists(path):
        return
    try:
        remove_tree(path)
    except OSError as e:
        logger.warning("Could not remove incomplete copy %s: %s", path, e)


def _move_across_devices(src: Path, dst: Path) -> None:
    logger.debug("%s and %s are on different devices, copying", src, dst)

    try:
        copy_tree(src, dst)
        verify_copy(src, dst)
    except (OSError, RelocationError) as e:
        _discard(dst)
        msg = f"Failed to copy {src} to {dst}: {e}"
        raise RelocationError(msg) from e

    try:
        remove_tree(src)
    except OSError as e:
        logger.warning("Failed to remove original %s, restoring it: %s", src, e)
        try:
            copy_tree(dst, src, skip_existing=True)
        except (OSError, RelocationError) as restore_error:
            msg = (
                f"Failed to remove original {src}: {e}; restoring it also failed "
                f"({restore_error}), data is kept in both {src} and {dst}"
            )
            raise RelocationError(msg) from e
        _discard(dst)
        msg = f"Failed to remove original {src}: {e}"
        raise RelocationError(msg) from e


def relocate(src: Path, dst: Path) -> None:
    """Move ``src`` to ``dst``, copying across devices when needed.

    Args:
        src: Existing file, symlink or directory.
        dst: Destination path; must not exist.

    Raises:
        FileExistsError: If something already exists at ``dst``.
        RelocationError: If the cross-device fallback fails. The source is
            preserved unless the message says otherwise.
        OSError: Any other rename failure, unchanged (no fallback).
    """
    if os.path.lexists(dst):
        raise FileExistsError(errno.EEXIST, "Destination already exists", str(dst))

    try:
        os.rename(src, dst)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        _move_across_devices(src, dst)
        return

    logger.debug("Renamed %s -> %s", src, dst)
