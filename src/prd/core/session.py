"""Resolution session — the owner of every per-run cache.

There is no module-level cache anywhere in PRD.  A session is created by
whoever starts a batch (or a one-off lookup), passed by reference into
every index, and discarded afterwards.  Two sessions never share state,
so concurrent batches and tests stay isolated.
"""

from __future__ import annotations

from prd.core.cluster import ClusterResolver
from prd.core.config import Config
from prd.core.exclusion import ExclusionIndex
from prd.core.markers import MarkerIndex
from prd.core.paths import PathTable


class ResolutionSession:
    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()
        self.exclusion = ExclusionIndex(self.config)
        self.markers = MarkerIndex(self.config)
        self.paths = PathTable()
        self.clusters = ClusterResolver(self.exclusion, self.paths)

    def invalidate(self) -> None:
        """Forget every memoised filesystem answer."""
        self.exclusion.clear()
        self.markers.clear()
        self.paths.clear()
