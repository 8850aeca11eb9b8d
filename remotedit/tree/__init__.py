"""Workspace tree snapshots and change watching."""

from .snapshot import NodeKind, TreeNode, build_tree
from .watcher import ChangeWatcher, TreeChangeEvent

__all__ = [
    "ChangeWatcher",
    "NodeKind",
    "TreeChangeEvent",
    "TreeNode",
    "build_tree",
]
