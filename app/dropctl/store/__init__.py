"""Holding store, stored-name codec and relocation engine.

This module exports the persistence layer for dropped entries.
"""

from dropctl.store.codec import decode, encode
from dropctl.store.holding import HoldingStore, HoldingStoreError
from dropctl.store.relocation import (
    NodeKind,
    RelocationError,
    TreeNode,
    purge,
    relocate,
    walk_tree,
)

__all__ = [
    "HoldingStore",
    "HoldingStoreError",
    "NodeKind",
    "RelocationError",
    "TreeNode",
    "decode",
    "encode",
    "purge",
    "relocate",
    "walk_tree",
]
