"""PRD domain exceptions.

Filesystem faults met while resolving a root are absorbed into the
resolution result (excluded / no marker) and never raised.  The typed
exceptions below cover caller mistakes and malformed input files only.
"""

from __future__ import annotations


# ── Base ────────────────────────────────────────────────────
class PRDError(Exception):
    """Root exception for all PRD errors."""


# ── Manifest (YAML config / cluster files) ──────────────────
class ManifestNotFound(PRDError):
    """The manifest YAML file does not exist at the expected path."""


class ManifestInvalid(PRDError):
    """The manifest failed schema validation or safe-load."""


class ManifestTooLarge(ManifestInvalid):
    """The manifest file exceeds the allowed size limit."""


# ── Resolution ──────────────────────────────────────────────
class EmptyClusterError(PRDError, ValueError):
    """The lowest common ancestor was requested for an empty cluster."""


# ── Traversal ───────────────────────────────────────────────
class TraversalRootInvalid(PRDError):
    """The traversal start path is missing or not a directory."""

    def __init__(self, root: str) -> None:
        super().__init__(f"Traversal root is not a directory: {root}")
        self.root = root
