"""Path primitives shared by every index.

Algorithm
---------
* :func:`iter_ancestors` walks from a path toward the filesystem root,
  one parent at a time.  It is a plain generator so callers can stop the
  walk with ``break`` (exclusion boundaries stop a walk, they are never
  skipped over).
* :func:`resolve_path` canonicalises a path (symlinks followed) and
  returns a typed result instead of raising.  Dangling links, symlink
  loops and permission errors all come back as :class:`ResolutionFailure`.
* :class:`PathTable` interns canonical paths as small integers so the
  ancestor-chain intersection used for LCA is an integer-set operation.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path


def iter_ancestors(path: Path, *, include_self: bool = False) -> Iterator[Path]:
    """Yield the ancestors of *path*, innermost first.

    The walk ends after the filesystem root (or the top of a relative
    path) has been yielded.
    """
    current = path
    if include_self:
        yield current
    while True:
        parent = current.parent
        if parent == current:
            return
        yield parent
        current = parent


def basename(path: Path) -> str:
    """Final path component, ``""`` for the filesystem root."""
    return path.name


def has_parent(path: Path) -> bool:
    return path.parent != path


@dataclass(frozen=True)
class Resolved:
    """Canonical form of a path that resolved cleanly."""

    path: Path


@dataclass(frozen=True)
class ResolutionFailure:
    """A path whose canonical form could not be computed."""

    path: Path
    reason: str


def resolve_path(path: Path) -> Resolved | ResolutionFailure:
    """Canonicalise *path*, following symlinks.

    The path must exist.  ``RuntimeError`` is caught alongside ``OSError``
    because older interpreters report symlink loops that way.
    """
    try:
        return Resolved(Path(path).resolve(strict=True))
    except (OSError, RuntimeError) as exc:
        return ResolutionFailure(Path(path), f"{type(exc).__name__}: {exc}")


class PathTable:
    """Interning table: canonical path <-> integer node id.

    Each node records its parent id and its depth (the filesystem root
    has depth 0), so an ancestor chain is a list of ints and "deepest"
    is a lookup instead of a path-length computation.
    """

    def __init__(self) -> None:
        self._ids: dict[Path, int] = {}
        self._paths: list[Path] = []
        self._parents: list[int] = []
        self._depths: list[int] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._paths)

    def intern(self, path: Path) -> int:
        """Return the node id for *path*, interning it and its ancestors."""
        node = self._ids.get(path)
        if node is not None:
            return node
        with self._lock:
            return self._intern_locked(path)

    def _intern_locked(self, path: Path) -> int:
        # Collect the un-interned suffix of the chain, then add it top-down.
        pending: list[Path] = []
        parent_id = -1
        for candidate in iter_ancestors(path, include_self=True):
            known = self._ids.get(candidate)
            if known is not None:
                parent_id = known
                break
            pending.append(candidate)

        for candidate in reversed(pending):
            node = len(self._paths)
            self._paths.append(candidate)
            self._parents.append(parent_id)
            self._depths.append(self._depths[parent_id] + 1 if parent_id >= 0 else 0)
            self._ids[candidate] = node
            parent_id = node
        return self._ids[path]

    def path(self, node: int) -> Path:
        return self._paths[node]

    def depth(self, node: int) -> int:
        return self._depths[node]

    def chain(self, node: int) -> list[int]:
        """Ancestor-or-self ids of *node*, innermost first."""
        out: list[int] = []
        while node >= 0:
            out.append(node)
            node = self._parents[node]
        return out

    def clear(self) -> None:
        with self._lock:
            self._ids.clear()
            self._paths.clear()
            self._parents.clear()
            self._depths.clear()
