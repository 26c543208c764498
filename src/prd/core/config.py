"""Resolution configuration (Pydantic v2, frozen).

A :class:`Config` holds the two name sets that drive the algorithm:

* ``exclusions`` — directory basenames that open an exclusion zone
  (installed dependencies, build output, caches).
* ``markers`` — file/directory basenames whose presence makes a
  directory a project root.

Configs are immutable for the length of a resolution run.  Derive a new
one with :meth:`Config.with_exclusions` / :meth:`Config.with_markers`
instead of restating the defaults.

Case folding is opt-in through ``case_insensitive``; it is never guessed
from the host platform.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, PrivateAttr, field_validator, model_validator

DEFAULT_EXCLUSIONS: frozenset[str] = frozenset(
    {
        ".venv",
        "venv",
        "node_modules",
        "__pycache__",
        "site-packages",
        ".tox",
        "dist",
        "build",
        ".egg-info",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        "target",
        "vendor",
        ".gradle",
    }
)

DEFAULT_MARKERS: frozenset[str] = frozenset(
    {
        ".git",
        ".hg",
        "pyproject.toml",
        "setup.py",
        "package.json",
        "Cargo.toml",
        "go.mod",
        "pom.xml",
        "build.gradle",
        "CMakeLists.txt",
        "deno.json",
        "composer.json",
        "mix.exs",
    }
)

_SEPARATORS = {"/", os.sep} | ({os.altsep} if os.altsep else set())


class Config(BaseModel):
    """Exclusion and marker names for one resolution run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    exclusions: frozenset[str] = DEFAULT_EXCLUSIONS
    markers: frozenset[str] = DEFAULT_MARKERS
    case_insensitive: bool = False

    _exclusion_keys: frozenset[str] = PrivateAttr(default=frozenset())
    _marker_keys: frozenset[str] = PrivateAttr(default=frozenset())

    @field_validator("exclusions", "markers")
    @classmethod
    def _names_are_basenames(cls, v: frozenset[str]) -> frozenset[str]:
        for name in v:
            if not name.strip():
                raise ValueError("names must not be blank")
            if name in (".", "..") or any(sep in name for sep in _SEPARATORS):
                raise ValueError(f"{name!r} is not a basename")
        return v

    @model_validator(mode="after")
    def _no_overlap(self) -> "Config":
        fold = self.fold
        overlap = {fold(n) for n in self.exclusions} & {fold(n) for n in self.markers}
        if overlap:
            raise ValueError(f"names are both exclusions and markers: {sorted(overlap)}")
        return self

    def model_post_init(self, __context: Any) -> None:
        self._exclusion_keys = frozenset(self.fold(n) for n in self.exclusions)
        self._marker_keys = frozenset(self.fold(n) for n in self.markers)

    # ── Derivation ──────────────────────────────────────────
    @classmethod
    def default(cls, *, case_insensitive: bool = False) -> "Config":
        return cls(case_insensitive=case_insensitive)

    def with_exclusions(self, *names: str) -> "Config":
        """New config with *names* added to the exclusion set."""
        return Config(
            exclusions=self.exclusions | frozenset(names),
            markers=self.markers,
            case_insensitive=self.case_insensitive,
        )

    def with_markers(self, *names: str) -> "Config":
        """New config with *names* added to the marker set."""
        return Config(
            exclusions=self.exclusions,
            markers=self.markers | frozenset(names),
            case_insensitive=self.case_insensitive,
        )

    # ── Matching ────────────────────────────────────────────
    def fold(self, name: str) -> str:
        """Normalise *name* the way this config compares names."""
        return name.casefold() if self.case_insensitive else name

    def matches_exclusion(self, name: str) -> bool:
        return self.fold(name) in self._exclusion_keys

    def matches_marker(self, name: str) -> bool:
        return self.fold(name) in self._marker_keys
