"""Directory scanner that discovers configuration artifacts."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from configurator.runtime.stamp_cache import StampCache
from configurator.schemas import RunMode

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Artifacts found under a root directory.

    ``discovered`` is in discovery order. ``parents`` maps each artifact
    below a subdirectory to that subdirectory's name; top-level artifacts
    have no entry. ``root_found`` distinguishes a missing root from an
    empty one.
    """
    discovered: List[str] = field(default_factory=list)
    parents: Dict[str, str] = field(default_factory=dict)
    root_found: bool = True
    skipped: List[str] = field(default_factory=list)


class DirectoryScanner:
    """Recursively enumerates regular files under a root directory."""

    def __init__(self, cache: Optional[StampCache] = None, mode: RunMode = RunMode.APPLY):
        self.cache = cache
        self.mode = mode

    def scan(self, root_dir: str) -> ScanResult:
        result = ScanResult()
        result.root_found = self._walk("", root_dir, result)
        return result

    def _walk(self, parent: str, directory: str, result: ScanResult) -> bool:
        try:
            entries = sorted(os.listdir(directory))
        except OSError as exc:
            logger.warning(
                "Failed to open directory: %s, under '%s' (%s)", directory, parent, exc.strerror or exc
            )
            return False

        logger.debug("Reading artifacts in '%s' under '%s'", directory, parent)

        for name in entries:
            file_path = os.path.join(directory, name)
            try:
                info = os.stat(file_path)
            except OSError as exc:
                # Abandon the rest of this directory; siblings already walked stay queued.
                logger.error("Failed to get file information on: %s (%s)", file_path, exc.strerror or exc)
                break

            if stat.S_ISDIR(info.st_mode):
                self._walk(name, file_path, result)
                continue
            if not stat.S_ISREG(info.st_mode):
                logger.debug("Ignoring '%s': not a regular file", file_path)
                continue

            if parent:
                result.parents[file_path] = parent

            if self._already_applied(file_path):
                logger.debug("Skipping '%s' because it has already been applied", file_path)
                result.skipped.append(file_path)
                continue

            logger.debug("Found artifact '%s'", file_path)
            result.discovered.append(file_path)

        return True

    def _already_applied(self, file_path: str) -> bool:
        if self.mode != RunMode.APPLY or self.cache is None:
            return False
        return self.cache.is_applied(file_path)
