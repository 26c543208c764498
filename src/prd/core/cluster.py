"""Dependency-cluster resolution.

The dependency relation is never computed here.  A static-analysis
collaborator hands over the connected component of a file (the files
that transitively import, or are imported by, it) and this module finds
the lowest common ancestor of that component.

Algorithm
---------
1. Canonicalise every member; drop members that fail to resolve or are
   excluded.  Duplicates collapse onto one canonical path.
2. Intern each survivor in the session's :class:`PathTable` and take its
   ancestor-or-self chain as a set of node ids.
3. Intersect the chains; the deepest surviving node is the LCA.

Fewer than two survivors means the cluster is unusable and the resolver
falls through to the orphanage rule.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Union

from prd.core.errors import EmptyClusterError
from prd.core.exclusion import ExclusionIndex
from prd.core.paths import PathTable, Resolved, resolve_path

ClusterProvider = Callable[[Path], Union[Iterable[Path], None]]
ClusterSource = Union[Mapping[Path, Iterable[Path]], ClusterProvider, None]


def _canonical_key(path: Path) -> Path:
    outcome = resolve_path(path)
    return outcome.path if isinstance(outcome, Resolved) else Path(path).absolute()


def as_provider(clusters: ClusterSource) -> ClusterProvider | None:
    """Normalise a cluster mapping or callable into a callable.

    Mapping keys are re-keyed by canonical path once, and every lookup is
    canonicalised too, so ``proj/../proj/a.py``, a relative spelling and a
    symlinked spelling all find the same entry.  Keys that collapse onto
    one canonical path get the union of their members.
    """
    if clusters is None:
        return None
    if callable(clusters):
        return clusters

    by_canonical: dict[Path, frozenset[Path]] = {}
    for key, members in clusters.items():
        canonical = _canonical_key(Path(key))
        by_canonical[canonical] = by_canonical.get(canonical, frozenset()) | frozenset(members)

    def lookup(file: Path) -> Iterable[Path] | None:
        return by_canonical.get(_canonical_key(Path(file)))

    return lookup


class ClusterResolver:
    """LCA over interned ancestor chains."""

    def __init__(self, exclusion: ExclusionIndex, table: PathTable) -> None:
        self.exclusion = exclusion
        self.table = table

    def valid_members(self, cluster: Iterable[Path]) -> list[Path]:
        """Canonical, non-excluded, de-duplicated members in sorted order."""
        valid: set[Path] = set()
        for member in cluster:
            excluded, resolved = self.exclusion.check(Path(member))
            if not excluded and resolved is not None:
                valid.add(resolved)
        return sorted(valid)

    def lca(self, cluster: Iterable[Path]) -> Path:
        """Deepest directory that is an ancestor-or-self of every member.

        Members are taken as already canonical; pass them through
        :meth:`valid_members` first.

        Raises
        ------
        EmptyClusterError
            If *cluster* is empty.
        """
        common: set[int] | None = None
        for member in cluster:
            chain = set(self.table.chain(self.table.intern(member)))
            common = chain if common is None else common & chain
        if common is None:
            raise EmptyClusterError("lca() needs at least one cluster member")
        # Paths on one host share the filesystem root, so common is non-empty.
        deepest = max(common, key=self.table.depth)
        return self.table.path(deepest)

    def resolve(self, cluster: Iterable[Path]) -> Path | None:
        """LCA of the usable members, or ``None`` if fewer than two remain."""
        members = self.valid_members(cluster)
        if len(members) < 2:
            return None
        return self.lca(members)
