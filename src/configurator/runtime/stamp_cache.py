"""Stamp cache recording which artifacts were last applied successfully."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Callable, Optional

from configurator.paths import ensure_directory, stamp_name
from configurator.schemas.settings import DEFAULT_CACHE_DIR_MODE, DEFAULT_STAMP_MODE

logger = logging.getLogger(__name__)

# Stamps are pushed this far past the artifact's mtime so that clock
# granularity can never make a later edit look older than the stamp.
STAMP_OFFSET_NS = 1_000_000_000

CachePolicy = Callable[[str], bool]


def _always_cacheable(_path: str) -> bool:
    return True


class StampCache:
    """Side-car stamp files compared by modification time.

    A stamp is a zero-length file under ``cache_dir`` whose name is the
    artifact path with separators replaced by ``_``. An artifact counts as
    applied while its stamp is at least as new as the artifact itself.
    """

    def __init__(
        self,
        cache_dir: Path,
        policy: Optional[CachePolicy] = None,
        dir_mode: int = DEFAULT_CACHE_DIR_MODE,
        stamp_mode: int = DEFAULT_STAMP_MODE,
    ):
        """Initialize the cache and create its directory.

        Args:
            cache_dir: Directory holding the stamp files
            policy: Optional per-path hook; returning False disables caching
            dir_mode: Permissions for a newly created cache directory
            stamp_mode: Permissions for newly created stamp files
        """
        self.cache_dir = Path(cache_dir)
        self.policy = policy or _always_cacheable
        self.stamp_mode = stamp_mode
        try:
            ensure_directory(self.cache_dir, dir_mode)
        except OSError as exc:
            logger.error("Failed to create cache directory %s: %s", self.cache_dir, exc)

    def stamp_path(self, artifact_path: str) -> Path:
        return self.cache_dir / stamp_name(artifact_path)

    def can_cache(self, artifact_path: str) -> bool:
        return bool(self.policy(artifact_path))

    def is_applied(self, artifact_path: str) -> bool:
        """Return True if the stamp for ``artifact_path`` is not older than the artifact."""
        if not self.can_cache(artifact_path):
            logger.debug("Caching disabled for %s", artifact_path)
            return False

        stamp = self.stamp_path(artifact_path)
        try:
            stamp_info = os.stat(stamp)
            artifact_info = os.stat(artifact_path)
        except OSError:
            return False

        logger.debug("%s may already be applied - %s exists", artifact_path, stamp)
        return stamp_info.st_mtime_ns >= artifact_info.st_mtime_ns

    def mark_applied(self, artifact_path: str) -> None:
        """Create or refresh the stamp, dated just after the artifact's mtime."""
        if not self.can_cache(artifact_path):
            return

        logger.debug("Attempting to mark '%s' as applied", artifact_path)
        times = None
        try:
            artifact_mtime_ns = os.stat(artifact_path).st_mtime_ns
            times = (time.time_ns(), artifact_mtime_ns + STAMP_OFFSET_NS)
        except OSError as exc:
            logger.warning(
                "Using current time as stamp - couldn't get timestamp of %s (%s)",
                artifact_path,
                exc.strerror or exc,
            )

        stamp = self.stamp_path(artifact_path)
        try:
            fd = os.open(stamp, os.O_CREAT | os.O_WRONLY, self.stamp_mode)
        except OSError as exc:
            logger.error("Failed to mark %s as applied: %s", artifact_path, exc.strerror or exc)
            return

        try:
            if times is None:
                os.utime(fd)
            else:
                os.utime(fd, ns=times)
        except OSError as exc:
            stamp.unlink(missing_ok=True)
            logger.error(
                "Failed to create stamp for %s (timestamp change failed: %s)",
                artifact_path,
                exc.strerror or exc,
            )
        else:
            logger.debug("'%s' marked as applied (stamp '%s' created)", artifact_path, stamp)
        finally:
            os.close(fd)

    def unmark_applied(self, artifact_path: str) -> None:
        """Remove the stamp; a missing stamp is not an error."""
        if not self.can_cache(artifact_path):
            return

        stamp = self.stamp_path(artifact_path)
        try:
            stamp.unlink()
        except FileNotFoundError:
            logger.debug("No stamp to remove for '%s'", artifact_path)
        except OSError as exc:
            logger.warning("Failed to remove stamp for '%s' ('%s'): %s", artifact_path, stamp, exc)
        else:
            logger.debug("Removed stamp for '%s'", artifact_path)
