"""Shared fixtures: on-disk project trees and logging isolation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest
import structlog

MakeTree = Callable[..., Path]


@pytest.fixture()
def make_tree(tmp_path: Path) -> MakeTree:
    """Create files and directories under ``tmp_path``.

    Entries ending in ``/`` are directories, everything else is an empty
    file.  Returns ``tmp_path``.
    """

    def _make(*entries: str) -> Path:
        for entry in entries:
            target = tmp_path / entry
            if entry.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.touch()
        return tmp_path

    return _make


@pytest.fixture(autouse=True)
def _reset_logging() -> object:  # pyright: ignore[reportUnusedFunction]
    """Undo any configure_logging() call made by a test."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)
