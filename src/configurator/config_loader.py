"""Settings loader for configurator.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import ValidationError

from configurator import __version__
from configurator.exceptions import ManifestLoadError
from configurator.paths import resolve_cache_dir
from configurator.runtime.stamp_cache import CachePolicy, StampCache
from configurator.schemas import CacheConfig, DomainConfig, SettingsManifest

SETTINGS_FILE = "configurator.yaml"


@dataclass(frozen=True)
class ConfiguratorSettings:
    cache: CacheConfig = field(default_factory=CacheConfig)
    domains: List[DomainConfig] = field(default_factory=list)
    version: str = __version__

    @property
    def cache_dir(self) -> Path:
        return resolve_cache_dir(self.cache.cache_dir)

    def domain(self, domain_id: str) -> Optional[DomainConfig]:
        for domain in self.domains:
            if domain.id == domain_id:
                return domain
        return None

    def build_cache(self, policy: Optional[CachePolicy] = None) -> StampCache:
        """Create the stamp cache described by these settings."""
        return StampCache(
            self.cache_dir,
            policy=policy,
            dir_mode=self.cache.cache_dir_mode,
            stamp_mode=self.cache.stamp_mode,
        )


def load_settings(path: Optional[Path] = None) -> ConfiguratorSettings:
    """Load configurator.yaml; a missing file yields the defaults.

    Raises:
        ManifestLoadError: if the file cannot be read, parsed or validated
    """
    if path is None or not path.exists():
        return ConfiguratorSettings()

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ManifestLoadError(path.name, f"Invalid YAML: {exc}")
    except OSError as exc:
        raise ManifestLoadError(path.name, str(exc))

    if not isinstance(data, dict):
        raise ManifestLoadError(path.name, "top level must be a mapping")

    try:
        manifest = SettingsManifest.model_validate(data)
    except ValidationError as exc:
        raise ManifestLoadError(path.name, _describe(exc))

    _check_unique_ids(path.name, manifest.domains)
    return ConfiguratorSettings(cache=manifest.cache, domains=list(manifest.domains))


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


def _check_unique_ids(file_name: str, domains: List[DomainConfig]) -> None:
    seen: Dict[str, DomainConfig] = {}
    for domain in domains:
        if domain.id in seen:
            raise ManifestLoadError(file_name, f"duplicate domain id '{domain.id}'")
        seen[domain.id] = domain
