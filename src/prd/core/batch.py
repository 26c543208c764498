"""Batch engine — bulk and directory-traversal entry points.

How it works
------------
1. **Validity phase** (single writer): every input file is checked
   against the exclusion index; the canonical paths of the survivors
   give the batch's SourceDirs, which are frozen into an
   :class:`OrphanageIndex`.
2. **Resolution phase**: :class:`RootResolver` runs once per file.  With
   ``workers > 1`` this phase fans out over a thread pool; the workers
   share the session caches (first write wins) and the frozen
   orphanage index, and write only their own result slot.

Results are keyed by the input path, in input order, and do not depend
on worker count or processing order.

Traversal
---------
:meth:`BatchEngine.traverse` walks a directory depth-first, pruning
exclusion zones before descending into them, then feeds the files it
found into :meth:`BatchEngine.resolve_all`.  A time budget or a cancel
event is checked between directory visits.
"""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

import structlog

from prd.core.cluster import ClusterSource, as_provider
from prd.core.config import Config
from prd.core.errors import TraversalRootInvalid
from prd.core.models import ResolutionResult
from prd.core.orphanage import OrphanageIndex
from prd.core.resolver import RootResolver
from prd.core.session import ResolutionSession

logger = structlog.get_logger()


@dataclass(frozen=True)
class TraversalOptions:
    """Knobs for :meth:`BatchEngine.traverse`.

    ``max_depth`` 0 collects only the files directly inside the start
    directory.  ``extensions`` are compared without their leading dot.
    """

    max_depth: int | None = None
    extensions: frozenset[str] | None = None
    time_budget: float | None = None  # seconds
    cancel: threading.Event | None = None

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.extensions is not None:
            object.__setattr__(self, "extensions", frozenset(e.lstrip(".") for e in self.extensions))

    def matches_extension(self, path: Path, config: Config) -> bool:
        if not self.extensions:
            return True
        suffix = path.suffix[1:]
        wanted = {config.fold(e) for e in self.extensions}
        return bool(suffix) and config.fold(suffix) in wanted


class BatchEngine:
    """Resolve many files against one session and one SourceDirs snapshot."""

    def __init__(
        self,
        config: Config | None = None,
        *,
        session: ResolutionSession | None = None,
        workers: int = 1,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.config = session.config if session is not None else (config or Config())
        self.session = session
        self.workers = workers

    def _session(self) -> ResolutionSession:
        # A caller-owned session persists across batches; otherwise every
        # batch starts with fresh caches.
        return self.session if self.session is not None else ResolutionSession(self.config)

    def resolve_all(
        self,
        files: Iterable[Path],
        clusters: ClusterSource = None,
    ) -> dict[Path, ResolutionResult]:
        """Resolve every file in *files* with batch-wide orphanage grouping."""
        session = self._session()
        inputs = list(dict.fromkeys(Path(f) for f in files))

        checked = {file: session.exclusion.check(file) for file in inputs}
        valid = [resolved for excluded, resolved in checked.values() if not excluded and resolved is not None]
        orphanage = OrphanageIndex.from_sources(valid, session.config)

        resolver = RootResolver(session, orphanage)
        provider = as_provider(clusters)

        def resolve_one(file: Path) -> ResolutionResult:
            cluster = provider(file) if provider is not None else None
            # Canonical paths come from the validity phase.
            return resolver.resolve_checked(file, checked[file], cluster)

        if self.workers > 1 and len(inputs) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                resolved_results = list(executor.map(resolve_one, inputs))
        else:
            resolved_results = [resolve_one(f) for f in inputs]

        results = dict(zip(inputs, resolved_results))
        logger.info(
            "batch_resolved",
            files=len(inputs),
            excluded=sum(1 for r in resolved_results if r.excluded),
            source_dirs=len(orphanage),
            workers=self.workers,
        )
        return results

    # ── Traversal ───────────────────────────────────────────
    def collect_files(self, root: Path, options: TraversalOptions | None = None) -> list[Path]:
        """Discover candidate source files under *root*, pruning exclusion zones."""
        options = options or TraversalOptions()
        root = Path(root)
        if not root.is_dir():
            raise TraversalRootInvalid(str(root))

        config = self.config
        files: list[Path] = []
        if config.matches_exclusion(root.name):
            return files

        deadline = time.monotonic() + options.time_budget if options.time_budget is not None else None
        root_depth = len(root.parts)
        pruned = 0

        for dirpath, dirnames, filenames in os.walk(root):
            if options.cancel is not None and options.cancel.is_set():
                logger.warning("traversal_stopped", root=str(root), reason="cancelled", files=len(files))
                break
            if deadline is not None and time.monotonic() > deadline:
                logger.warning("traversal_stopped", root=str(root), reason="time_budget", files=len(files))
                break

            current = Path(dirpath)
            depth = len(current.parts) - root_depth

            kept = [d for d in dirnames if not config.matches_exclusion(d)]
            pruned += len(dirnames) - len(kept)
            if options.max_depth is not None and depth >= options.max_depth:
                kept = []
            dirnames[:] = sorted(kept)

            for name in sorted(filenames):
                path = current / name
                if path.is_file() and options.matches_extension(path, config):
                    files.append(path)

        logger.info("traversal_complete", root=str(root), files=len(files), pruned_dirs=pruned)
        return files

    def traverse(
        self,
        root: Path,
        options: TraversalOptions | None = None,
        clusters: ClusterSource = None,
    ) -> dict[Path, ResolutionResult]:
        """Discover files under *root* and resolve them as one batch."""
        return self.resolve_all(self.collect_files(root, options), clusters)

    def discover_roots(self, root: Path, options: TraversalOptions | None = None) -> list[Path]:
        """Sorted unique roots of every non-excluded file under *root*."""
        results = self.traverse(root, options)
        return sorted({r.root for r in results.values() if r.root is not None})
