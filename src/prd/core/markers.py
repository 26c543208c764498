"""Marker lookup.

``has_marker(directory)`` answers whether *directory* directly contains
an entry named in the marker set.  The directory is listed once and the
entry names are compared with the config's folding, so case-insensitive
matching costs nothing extra.

Fails open: a directory that cannot be listed has no marker.  Denying a
marker check must not widen the exclusion zone.
"""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from prd.core.config import Config

logger = structlog.get_logger()


def _list_entries(directory: Path) -> list[str]:
    return os.listdir(directory)


class MarkerIndex:
    """Memoised ``has_marker`` keyed by directory."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self._cache: dict[Path, bool] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def has_marker(self, directory: Path) -> bool:
        cached = self._cache.get(directory)
        if cached is not None:
            return cached
        return self._cache.setdefault(directory, self._scan(directory))

    def _scan(self, directory: Path) -> bool:
        if not self.config.markers:
            return False
        try:
            entries = _list_entries(directory)
        except OSError as exc:
            logger.debug("marker_check_failed", directory=str(directory), error=type(exc).__name__)
            return False
        return any(self.config.matches_marker(name) for name in entries)

    def clear(self) -> None:
        self._cache.clear()
