"""PRD runtime settings (Pydantic v2 Settings).

Centralises every knob the CLI exposes so that:

* Environment overrides work (``PRD_CASE_INSENSITIVE``, ``PRD_WORKERS``, etc.).
* A YAML config manifest can extend the default name sets.
* Tests can build a :class:`Config` without touching the environment.

Usage
-----
::

    from prd.core.settings import Settings

    s = Settings(extra_markers=["WORKSPACE"])
    config = s.to_config()      # defaults + manifest + extras
"""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from prd.core.config import Config
from prd.manifest import load_config_manifest


class Settings(BaseSettings):
    """All runtime configuration for PRD."""

    model_config = SettingsConfigDict(
        env_prefix="PRD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Name sets ───────────────────────────────────────────
    config_file: Path | None = None
    extra_exclusions: list[str] = []
    extra_markers: list[str] = []
    case_insensitive: bool | None = None  # None: keep the manifest's choice

    # ── Manifest settings ───────────────────────────────────
    manifest_max_size_kb: int = 512  # reject manifests > 512 KB

    # ── Execution ───────────────────────────────────────────
    workers: int = 1

    # ── Logging ─────────────────────────────────────────────
    log_level: str = "WARNING"
    log_json: bool = False

    @field_validator("workers")
    @classmethod
    def _workers_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("workers must be >= 1")
        return v

    def to_config(self) -> Config:
        """Build a :class:`Config`: defaults, then the manifest, then extras.

        Raises
        ------
        ManifestNotFound, ManifestInvalid
            If ``config_file`` is set and cannot be loaded.
        """
        if self.config_file is not None:
            config = load_config_manifest(
                self.config_file,
                max_size_bytes=self.manifest_max_size_kb * 1024,
            )
        else:
            config = Config()

        if self.case_insensitive is not None and self.case_insensitive != config.case_insensitive:
            config = Config(
                exclusions=config.exclusions,
                markers=config.markers,
                case_insensitive=self.case_insensitive,
            )
        if self.extra_exclusions:
            config = config.with_exclusions(*self.extra_exclusions)
        if self.extra_markers:
            config = config.with_markers(*self.extra_markers)
        return config
