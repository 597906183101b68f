"""Shipwright runtime settings.

Centralised, typed settings for the CLI and the scaffolding pipeline.  Like
the project options, settings are Pydantic v2 models so they are validated at
construction time and can be read from environment variables without
boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


def _default_cache_dir() -> Path:
    xdg = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg) if xdg else Path.home() / ".cache"
    return base / "shipwright"


class Settings(BaseModel):
    """Global Shipwright settings.

    Instances are created once by the CLI entry point (usually through
    :meth:`from_env`) and passed to the pipeline, which hands the relevant
    pieces to the version resolver and the command runner.
    """

    cache_dir: Path = Field(default_factory=_default_cache_dir)
    registry_url: str = Field(default="https://registry.npmjs.org")
    fetch_timeout: float = Field(
        default=5.0, ge=1.0, description="Per-package registry lookup timeout in seconds"
    )
    refresh_window_hours: float = Field(
        default=6.0, gt=0, description="Age after which cached versions count as stale"
    )
    offline: bool = Field(default=False, description="Never contact the package registry")
    command_timeout: Optional[int] = Field(
        default=None,
        description="Timeout for installs and generators in seconds (None = wait forever)",
    )
    git_timeout: int = Field(default=60, ge=5, description="Timeout for each git command")

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def version_cache_path(self) -> Path:
        """JSON file that persists the version cache between invocations."""
        return self.cache_dir / "version-cache.json"

    @property
    def refresh_window_seconds(self) -> float:
        return self.refresh_window_hours * 3600

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            SHIPWRIGHT_CACHE_DIR, SHIPWRIGHT_REGISTRY_URL,
            SHIPWRIGHT_FETCH_TIMEOUT, SHIPWRIGHT_REFRESH_HOURS,
            SHIPWRIGHT_OFFLINE, SHIPWRIGHT_COMMAND_TIMEOUT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("SHIPWRIGHT_CACHE_DIR"):
            kwargs["cache_dir"] = Path(os.environ["SHIPWRIGHT_CACHE_DIR"])
        if os.environ.get("SHIPWRIGHT_REGISTRY_URL"):
            kwargs["registry_url"] = os.environ["SHIPWRIGHT_REGISTRY_URL"]
        if os.environ.get("SHIPWRIGHT_FETCH_TIMEOUT"):
            kwargs["fetch_timeout"] = float(os.environ["SHIPWRIGHT_FETCH_TIMEOUT"])
        if os.environ.get("SHIPWRIGHT_REFRESH_HOURS"):
            kwargs["refresh_window_hours"] = float(os.environ["SHIPWRIGHT_REFRESH_HOURS"])
        if os.environ.get("SHIPWRIGHT_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["SHIPWRIGHT_COMMAND_TIMEOUT"])

        offline = os.environ.get("SHIPWRIGHT_OFFLINE", "").strip().lower()
        kwargs["offline"] = offline in ("1", "true", "yes", "on")

        return cls(**kwargs)
