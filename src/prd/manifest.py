"""Config and dependency-cluster manifest loaders.

Both manifests are YAML (JSON is accepted too, being a YAML subset) and
are loaded with the same safety guards:

* Size limit (default 512 KB) — rejects oversized files.
* ``yaml.safe_load`` only — no arbitrary Python objects.
* Encoding validated (UTF-8).
* Typed exceptions (:class:`ManifestNotFound`, :class:`ManifestInvalid`,
  :class:`ManifestTooLarge`).

Config manifest
---------------
::

    exclusions: [generated]      # added to the defaults
    markers: [WORKSPACE]
    case_insensitive: false
    replace_defaults: false      # true: use only the names listed here

Cluster manifest
----------------
Either a list of connected components::

    clusters:
      - [scripts/a.py, scripts/b.py, scripts/utils/c.py]

or an explicit mapping ``{file: [files]}``.  Relative paths are
anchored at the manifest's own directory, made absolute at load time so
the clusters stay valid whatever the working directory is later.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from prd.core.config import DEFAULT_EXCLUSIONS, DEFAULT_MARKERS, Config
from prd.core.errors import ManifestInvalid, ManifestNotFound, ManifestTooLarge

# Default max manifest size (bytes).
_DEFAULT_MAX_SIZE_BYTES = 512 * 1024  # 512 KB


# ── Pydantic v2 strict models ──────────────────────────────
class ConfigManifest(BaseModel):
    """Schema of a config manifest."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    exclusions: list[str] = []
    markers: list[str] = []
    case_insensitive: bool = False
    replace_defaults: bool = False

    def to_config(self) -> Config:
        if self.replace_defaults:
            exclusions, markers = frozenset(self.exclusions), frozenset(self.markers)
        else:
            exclusions = DEFAULT_EXCLUSIONS | frozenset(self.exclusions)
            markers = DEFAULT_MARKERS | frozenset(self.markers)
        return Config(exclusions=exclusions, markers=markers, case_insensitive=self.case_insensitive)


# ── Loaders ─────────────────────────────────────────────────
def _read_yaml(path: Path, max_size_bytes: int) -> Any:
    if not path.exists():
        raise ManifestNotFound(f"manifest not found: {path}")

    # Size guard.
    size = path.stat().st_size
    if size > max_size_bytes:
        raise ManifestTooLarge(
            f"manifest {path.name} is {size:,} bytes (limit {max_size_bytes:,})"
        )

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ManifestInvalid(f"manifest is not valid UTF-8: {exc}") from exc

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestInvalid(f"YAML parse error: {exc}") from exc


def load_config_manifest(
    path: Path,
    *,
    max_size_bytes: int = _DEFAULT_MAX_SIZE_BYTES,
) -> Config:
    """Load a config manifest and build the :class:`Config` it describes.

    Raises
    ------
    ManifestNotFound
        File does not exist.
    ManifestTooLarge
        File exceeds *max_size_bytes*.
    ManifestInvalid
        YAML parse error, schema violation or invalid names.
    """
    raw = _read_yaml(Path(path), max_size_bytes)
    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ManifestInvalid("config manifest must be a mapping")

    try:
        return ConfigManifest.model_validate(raw).to_config()
    except ValidationError as exc:
        raise ManifestInvalid(f"config manifest invalid: {exc}") from exc


def _as_path_list(value: Any, where: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) and v.strip() for v in value):
        raise ManifestInvalid(f"{where} must be a list of non-blank path strings")
    return value


def load_cluster_manifest(
    path: Path,
    *,
    max_size_bytes: int = _DEFAULT_MAX_SIZE_BYTES,
) -> dict[Path, frozenset[Path]]:
    """Load dependency clusters as ``{file: cluster}``.

    A component listed under ``clusters`` maps each of its members to the
    whole component.  A file listed in two components gets their union.

    Raises
    ------
    ManifestNotFound, ManifestTooLarge, ManifestInvalid
        As for :func:`load_config_manifest`.
    """
    path = Path(path)
    raw = _read_yaml(path, max_size_bytes)
    if raw is None:
        return {}

    base = path.parent.absolute()

    def anchor(entry: str) -> Path:
        p = Path(entry).expanduser()
        return p if p.is_absolute() else base / p

    out: dict[Path, frozenset[Path]] = {}
    if isinstance(raw, dict) and "clusters" in raw:
        components = raw["clusters"]
        if not isinstance(components, list):
            raise ManifestInvalid("manifest 'clusters' key must contain a list")
        for i, component in enumerate(components):
            members = frozenset(anchor(m) for m in _as_path_list(component, f"cluster #{i}"))
            for member in members:
                out[member] = out.get(member, frozenset()) | members
    elif isinstance(raw, dict):
        for key, value in raw.items():
            if not isinstance(key, str) or not key.strip():
                raise ManifestInvalid("cluster mapping keys must be path strings")
            out[anchor(key)] = frozenset(anchor(m) for m in _as_path_list(value, f"cluster for {key!r}"))
    else:
        raise ManifestInvalid("cluster manifest schema invalid: expected {'clusters': list} or a mapping")
    return out
