"""Settings schemas for configurator.yaml."""

from __future__ import annotations

from typing import List

from pydantic import Field, field_validator

from .base import SchemaBase
from .outcome import RunMode

DEFAULT_CACHE_DIR = "/var/cache/configurator"
DEFAULT_CACHE_DIR_MODE = 0o755
DEFAULT_STAMP_MODE = 0o644


class DomainConfig(SchemaBase):
    """One configuration domain: an id and the directory holding its artifacts."""

    id: str
    directory: str
    mode: RunMode = Field(default=RunMode.APPLY)

    @field_validator("id", "directory")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value


class CacheConfig(SchemaBase):
    cache_dir: str = Field(default=DEFAULT_CACHE_DIR)
    cache_dir_mode: int = Field(default=DEFAULT_CACHE_DIR_MODE)
    stamp_mode: int = Field(default=DEFAULT_STAMP_MODE)


class SettingsManifest(SchemaBase):
    cache: CacheConfig = Field(default_factory=CacheConfig)
    domains: List[DomainConfig] = Field(default_factory=list)
