"""Tests for prd.core.cluster — dependency-cluster LCA."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import MakeTree
from prd.core.cluster import ClusterResolver, as_provider
from prd.core.config import Config
from prd.core.errors import EmptyClusterError
from prd.core.exclusion import ExclusionIndex
from prd.core.paths import PathTable


@pytest.fixture()
def resolver() -> ClusterResolver:
    return ClusterResolver(ExclusionIndex(Config()), PathTable())


# ── LCA ─────────────────────────────────────────────────────
def test_lca_of_sibling_and_nested_files(make_tree: MakeTree, resolver: ClusterResolver) -> None:
    root = make_tree("scripts/a.py", "scripts/b.py", "scripts/utils/c.py")
    cluster = [root / "scripts/a.py", root / "scripts/b.py", root / "scripts/utils/c.py"]
    assert resolver.resolve(cluster) == root / "scripts"


def test_lca_across_branches(make_tree: MakeTree, resolver: ClusterResolver) -> None:
    root = make_tree("x/one/a.py", "x/two/deep/b.py")
    assert resolver.resolve([root / "x/one/a.py", root / "x/two/deep/b.py"]) == root / "x"


def test_lca_is_the_most_specific_common_directory(resolver: ClusterResolver) -> None:
    assert resolver.lca([Path("/r/s/t/a.py"), Path("/r/s/t/u/b.py")]) == Path("/r/s/t")


def test_lca_of_empty_cluster_raises(resolver: ClusterResolver) -> None:
    """Empty input raises a ValueError subclass."""
    with pytest.raises(EmptyClusterError):
        resolver.lca([])
    with pytest.raises(ValueError):
        resolver.lca([])


# ── Member filtering ────────────────────────────────────────
def test_excluded_members_are_dropped(make_tree: MakeTree, resolver: ClusterResolver) -> None:
    root = make_tree("scripts/a.py", "node_modules/dep/index.js")
    cluster = [root / "scripts/a.py", root / "node_modules/dep/index.js"]
    assert resolver.valid_members(cluster) == [root / "scripts/a.py"]
    assert resolver.resolve(cluster) is None


def test_unresolvable_members_are_dropped(make_tree: MakeTree, resolver: ClusterResolver) -> None:
    root = make_tree("scripts/a.py", "scripts/b.py")
    cluster = [root / "scripts/a.py", root / "scripts/b.py", root / "scripts/ghost.py"]
    assert resolver.valid_members(cluster) == [root / "scripts/a.py", root / "scripts/b.py"]


def test_aliases_collapse_to_one_member(make_tree: MakeTree, resolver: ClusterResolver) -> None:
    """A symlink and its target are one member, so no usable cluster."""
    root = make_tree("scripts/a.py")
    (root / "alias.py").symlink_to(root / "scripts/a.py")
    assert resolver.resolve([root / "scripts/a.py", root / "alias.py"]) is None


def test_single_member_is_unusable(make_tree: MakeTree, resolver: ClusterResolver) -> None:
    root = make_tree("scripts/a.py")
    assert resolver.resolve([root / "scripts/a.py"]) is None


# ── Provider normalisation ──────────────────────────────────
def test_as_provider_none() -> None:
    assert as_provider(None) is None


def test_as_provider_passes_callables_through() -> None:
    def fn(file: Path) -> list[Path]:
        return [file]

    assert as_provider(fn) is fn


def test_as_provider_mapping_tries_canonical_path(make_tree: MakeTree) -> None:
    """Symlinked spellings of a key find the same cluster."""
    root = make_tree("s/a.py", "s/b.py")
    (root / "link.py").symlink_to(root / "s/a.py")
    cluster = {root / "s/a.py", root / "s/b.py"}
    provider = as_provider({root / "s/a.py": cluster})
    assert provider is not None
    assert provider(root / "s/a.py") == cluster
    assert provider(root / "link.py") == cluster
    assert provider(root / "s/b.py") is None


def test_as_provider_mapping_keys_with_dotdot(make_tree: MakeTree) -> None:
    """A key spelled through ``..`` still matches the plain absolute path."""
    root = make_tree("proj/x.txt", "other/a.py", "other/lib/b.py")
    key = root / "proj/../other/a.py"
    cluster = [key, root / "proj/../other/lib/b.py"]
    provider = as_provider({key: cluster})
    assert provider is not None
    assert provider(root / "other/a.py") == frozenset(cluster)


def test_as_provider_merges_keys_with_one_canonical_path(make_tree: MakeTree) -> None:
    root = make_tree("s/a.py", "s/b.py", "s/c.py")
    provider = as_provider({
        root / "s/a.py": [root / "s/b.py"],
        root / "s/../s/a.py": [root / "s/c.py"],
    })
    assert provider is not None
    assert provider(root / "s/a.py") == frozenset({root / "s/b.py", root / "s/c.py"})
