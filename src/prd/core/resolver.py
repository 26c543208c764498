"""Root resolver — the per-file case dispatch.

Exactly one case fires per file, checked in this order (first match wins):

1. **Excluded** — the canonical path sits in an exclusion zone → no root.
2. **Marker** — walking up from the parent, the first directory holding
   a marker, provided the walk meets it before an exclusion boundary or
   the filesystem root.  Innermost wins; marker types are not ranked.
3. **Cluster** — no marker, but the caller supplied a dependency cluster
   with at least two usable members → their lowest common ancestor.
4. **Orphanage** — the outermost SourceDir above the file, else its parent.
5. **Filesystem root** — the file has no parent → the file itself.

Everything is computed on canonical paths, so the roots returned are
canonical too.  Apart from filling the session caches the dispatch has
no side effects; it never touches the filesystem beyond metadata reads.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from prd.core.models import ResolutionCase, ResolutionResult
from prd.core.orphanage import OrphanageIndex
from prd.core.paths import has_parent, iter_ancestors
from prd.core.session import ResolutionSession


class RootResolver:
    """Case dispatch over one session's indices and one batch's SourceDirs."""

    def __init__(self, session: ResolutionSession, orphanage: OrphanageIndex) -> None:
        self.session = session
        self.config = session.config
        self.orphanage = orphanage

    def find_marker_root(self, resolved: Path) -> Path | None:
        """Innermost marker directory above *resolved*, if reachable."""
        markers = self.session.markers
        for directory in iter_ancestors(resolved):
            if self.config.matches_exclusion(directory.name):
                break
            if markers.has_marker(directory):
                return directory
        return None

    def resolve(self, file: Path, cluster: Iterable[Path] | None = None) -> ResolutionResult:
        return self.resolve_checked(file, self.session.exclusion.check(file), cluster)

    def resolve_checked(
        self,
        file: Path,
        checked: tuple[bool, Path | None],
        cluster: Iterable[Path] | None = None,
    ) -> ResolutionResult:
        """Dispatch for a file whose ``ExclusionIndex.check`` already ran."""
        excluded, resolved = checked
        if excluded or resolved is None:
            return ResolutionResult.excluded_file(file)

        marker_root = self.find_marker_root(resolved)
        if marker_root is not None:
            return ResolutionResult(file, marker_root, ResolutionCase.MARKER)

        if cluster is not None:
            lca = self.session.clusters.resolve(cluster)
            if lca is not None:
                return ResolutionResult(file, lca, ResolutionCase.CLUSTER)

        if has_parent(resolved):
            return ResolutionResult(file, self.orphanage.orphanage(resolved), ResolutionCase.ORPHANAGE)

        return ResolutionResult(file, resolved, ResolutionCase.FILESYSTEM_ROOT)
