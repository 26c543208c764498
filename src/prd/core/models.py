"""PRD domain models — resolution outcome and the case that produced it."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any


class ResolutionCase(str, Enum):
    EXCLUDED = "excluded"
    MARKER = "marker"
    CLUSTER = "cluster"
    ORPHANAGE = "orphanage"
    FILESYSTEM_ROOT = "filesystem_root"


@dataclass(frozen=True)
class ResolutionResult:
    """Root of one source file.

    ``root`` is ``None`` only for excluded files; every other case
    carries a concrete directory.
    """

    file: Path
    root: Path | None
    case: ResolutionCase

    @property
    def excluded(self) -> bool:
        return self.case is ResolutionCase.EXCLUDED

    @classmethod
    def excluded_file(cls, file: Path) -> "ResolutionResult":
        return cls(file=file, root=None, case=ResolutionCase.EXCLUDED)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"file": str(self.file)}
        if self.root is not None:
            out["root"] = str(self.root)
        if self.excluded:
            out["excluded"] = True
        return out
