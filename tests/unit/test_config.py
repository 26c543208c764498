"""Tests for prd.core.config — name sets, derivation, validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from prd.core.config import DEFAULT_EXCLUSIONS, DEFAULT_MARKERS, Config


# ── Defaults ────────────────────────────────────────────────
def test_default_sets() -> None:
    c = Config()
    assert c.exclusions == DEFAULT_EXCLUSIONS
    assert c.markers == DEFAULT_MARKERS
    assert c.case_insensitive is False
    assert {"node_modules", ".venv", "target"} <= c.exclusions
    assert {".git", "Cargo.toml", "pyproject.toml"} <= c.markers


def test_default_classmethod_sets_case_mode() -> None:
    assert Config.default(case_insensitive=True).case_insensitive is True


# ── Derivation ──────────────────────────────────────────────
def test_with_exclusions_extends_defaults() -> None:
    base = Config()
    derived = base.with_exclusions("generated", "out")
    assert derived.exclusions == DEFAULT_EXCLUSIONS | {"generated", "out"}
    assert derived.markers == base.markers
    assert "generated" not in base.exclusions


def test_with_markers_extends_defaults() -> None:
    derived = Config().with_markers("WORKSPACE", "BUILD")
    assert {"WORKSPACE", "BUILD"} <= derived.markers
    assert DEFAULT_MARKERS <= derived.markers


def test_derivation_keeps_case_mode() -> None:
    derived = Config(case_insensitive=True).with_markers("WORKSPACE")
    assert derived.case_insensitive is True
    assert derived.matches_marker("workspace")


def test_config_is_frozen() -> None:
    c = Config()
    with pytest.raises(ValidationError):
        c.case_insensitive = True  # type: ignore[misc]


# ── Validation (eager, at construction) ─────────────────────
@pytest.mark.parametrize("bad", ["", "   ", "a/b", ".", ".."])
def test_invalid_names_rejected(bad: str) -> None:
    with pytest.raises(ValidationError):
        Config(markers=frozenset({bad}))


def test_overlapping_sets_rejected() -> None:
    with pytest.raises(ValidationError, match="both exclusions and markers"):
        Config(exclusions=frozenset({"build"}), markers=frozenset({"build"}))


def test_overlap_detected_with_case_folding() -> None:
    with pytest.raises(ValidationError):
        Config(exclusions=frozenset({"Build"}), markers=frozenset({"build"}), case_insensitive=True)
    # Case-sensitive: distinct names, no conflict.
    Config(exclusions=frozenset({"Build"}), markers=frozenset({"build"}))


def test_empty_sets_are_valid() -> None:
    c = Config(exclusions=frozenset(), markers=frozenset())
    assert not c.matches_exclusion("node_modules")
    assert not c.matches_marker(".git")


def test_lists_are_coerced() -> None:
    c = Config(exclusions=["a", "a", "b"], markers=[".git"])  # type: ignore[arg-type]
    assert c.exclusions == frozenset({"a", "b"})


# ── Matching ────────────────────────────────────────────────
def test_case_sensitive_by_default() -> None:
    c = Config()
    assert c.matches_exclusion("node_modules")
    assert not c.matches_exclusion("Node_Modules")
    assert not c.matches_marker("CARGO.TOML")


def test_case_insensitive_matching() -> None:
    c = Config(case_insensitive=True)
    assert c.matches_exclusion("Node_Modules")
    assert c.matches_marker("CARGO.TOML")
    assert c.fold("ABC") == "abc"
