"""Centralized path utilities for Configurator state."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from configurator.schemas.settings import DEFAULT_CACHE_DIR

CACHE_ENV_VAR = "CONFIGURATOR_CACHE_DIR"


def resolve_cache_dir(configured: Optional[str] = None) -> Path:
    """Return the directory holding configured stamps.

    Priority:
        1. CONFIGURATOR_CACHE_DIR environment variable (absolute or relative).
        2. The value from configurator.yaml, if provided.
        3. The built-in default.
    """
    env_path = os.getenv(CACHE_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path(configured or DEFAULT_CACHE_DIR).expanduser().resolve()


def ensure_directory(path: Path, mode: int = 0o755) -> Path:
    """Create the directory if it does not exist and return it."""
    path.mkdir(mode=mode, parents=True, exist_ok=True)
    return path


def stamp_name(artifact_path: str) -> str:
    """Flatten an artifact path into a single stamp file name."""
    return artifact_path.replace(os.sep, "_")
