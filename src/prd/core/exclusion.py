"""Exclusion zones.

A path is excluded when any component of its *canonical* form is a
configured exclusion name.  Canonicalising first means an editable
install (``site-packages/mylib -> ../../src/mylib``) is judged by where
it really lives, not by the link that was followed to reach it.

Fails closed: a path that cannot be canonicalised (dangling link,
symlink loop, permission error) is excluded.
"""

from __future__ import annotations

from pathlib import Path

from prd.core.config import Config
from prd.core.paths import Resolved, resolve_path


class ExclusionIndex:
    """Memoised ``is_excluded`` keyed by canonical path."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self._cache: dict[Path, bool] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def is_excluded(self, path: Path) -> bool:
        return self.check(path)[0]

    def check(self, path: Path) -> tuple[bool, Path | None]:
        """Return ``(excluded, canonical_path)``.

        ``canonical_path`` is ``None`` when resolution failed.
        """
        outcome = resolve_path(path)
        if not isinstance(outcome, Resolved):
            return True, None
        return self.is_excluded_resolved(outcome.path), outcome.path

    def is_excluded_resolved(self, resolved: Path) -> bool:
        """Exclusion test for a path that is already canonical."""
        cached = self._cache.get(resolved)
        if cached is not None:
            return cached
        excluded = any(self.config.matches_exclusion(part) for part in resolved.parts)
        # First write wins; a racing writer computed the same value.
        return self._cache.setdefault(resolved, excluded)

    def clear(self) -> None:
        self._cache.clear()
