"""Library surface.

Every function returns ``Path | None`` per file, where ``None`` always
and only means *excluded*.  Every input file appears in the returned
mapping, so "not computed" can never be confused with "no root".

Prefer :func:`resolve_batch` over repeated :func:`resolve` calls: the
orphanage rule needs the whole input set to group marker-less files.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from prd.core.batch import BatchEngine, TraversalOptions
from prd.core.cluster import ClusterSource
from prd.core.config import Config
from prd.core.orphanage import OrphanageIndex
from prd.core.resolver import RootResolver
from prd.core.session import ResolutionSession


def resolve(
    file: Path,
    cluster: Iterable[Path] | None = None,
    config: Config | None = None,
    *,
    session: ResolutionSession | None = None,
) -> Path | None:
    """Root of a single file.

    Without batch context the orphanage rule only knows this file, so an
    orphan resolves to its own parent directory.
    """
    session = session or ResolutionSession(config)
    file = Path(file)
    checked = session.exclusion.check(file)
    excluded, resolved = checked
    sources = [resolved] if not excluded and resolved is not None else []
    resolver = RootResolver(session, OrphanageIndex.from_sources(sources, session.config))
    return resolver.resolve_checked(file, checked, cluster).root


def resolve_batch(
    files: Iterable[Path],
    clusters: ClusterSource = None,
    config: Config | None = None,
    *,
    workers: int = 1,
) -> dict[Path, Path | None]:
    """Roots of many files with consistent orphanage grouping."""
    engine = BatchEngine(config, workers=workers)
    return {file: result.root for file, result in engine.resolve_all(files, clusters).items()}


def traverse(
    root: Path,
    config: Config | None = None,
    options: TraversalOptions | None = None,
    *,
    max_depth: int | None = None,
    extensions: Iterable[str] | None = None,
    clusters: ClusterSource = None,
    workers: int = 1,
) -> dict[Path, Path | None]:
    """Discover files under *root* (pruning exclusion zones) and resolve them."""
    if options is None:
        options = TraversalOptions(
            max_depth=max_depth,
            extensions=frozenset(extensions) if extensions is not None else None,
        )
    engine = BatchEngine(config, workers=workers)
    return {file: result.root for file, result in engine.traverse(Path(root), options, clusters).items()}


def discover_roots(
    root: Path,
    config: Config | None = None,
    options: TraversalOptions | None = None,
) -> list[Path]:
    """Unique project roots found under *root*, sorted."""
    return BatchEngine(config).discover_roots(Path(root), options)
