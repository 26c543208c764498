"""Orphanage index.

An *orphan* is a valid source file with no marker anywhere in its
ancestry.  Its *orphanage* is the outermost ancestor that directly holds
a valid source file of the same batch (a SourceDir), so a lone file in
``proj/app/model/`` lands under ``proj/`` together with ``proj/main.py``
instead of fragmenting into its own root.

The index is built in one single-writer phase and frozen afterwards;
readers never see it half-populated.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from prd.core.config import Config
from prd.core.paths import iter_ancestors


class OrphanageIndex:
    """Frozen set of SourceDirs for one batch."""

    def __init__(self, source_dirs: Iterable[Path], config: Config) -> None:
        self.config = config
        self.source_dirs: frozenset[Path] = frozenset(source_dirs)

    @classmethod
    def from_sources(cls, valid_sources: Iterable[Path], config: Config) -> "OrphanageIndex":
        """Build from canonical, non-excluded source paths."""
        return cls((s.parent for s in valid_sources if s.parent != s), config)

    def __len__(self) -> int:
        return len(self.source_dirs)

    def __contains__(self, directory: object) -> bool:
        return directory in self.source_dirs

    def orphanage(self, file: Path) -> Path:
        """Outermost SourceDir above *file*, else ``file.parent``.

        Walks upward keeping the last hit.  The walk stops at the first
        exclusion boundary; nothing at or above it is a candidate.
        """
        outermost: Path | None = None
        for ancestor in iter_ancestors(file):
            if self.config.matches_exclusion(ancestor.name):
                break
            if ancestor in self.source_dirs:
                outermost = ancestor
        return outermost if outermost is not None else file.parent
