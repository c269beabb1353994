"""Success/failure bookkeeping shared by the configurators of one pipeline run."""

from __future__ import annotations

import threading
from typing import List


class RunStatistics:
    """Ordered records of artifacts that succeeded or failed.

    One instance is shared by every configurator taking part in a pipeline
    run and reset between independent runs. Mutations are guarded by a lock
    so configurators driven from different threads can share it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._succeeded: List[str] = []
        self._failed: List[str] = []

    def record_success(self, artifact_path: str) -> None:
        with self._lock:
            self._succeeded.append(artifact_path)

    def record_failure(self, artifact_path: str) -> None:
        with self._lock:
            self._failed.append(artifact_path)

    @property
    def succeeded(self) -> List[str]:
        """Snapshot of successfully processed artifact paths."""
        with self._lock:
            return list(self._succeeded)

    @property
    def failed(self) -> List[str]:
        """Snapshot of failed artifact paths."""
        with self._lock:
            return list(self._failed)

    def reset(self) -> None:
        """Clear both records (start of an independent pipeline run)."""
        with self._lock:
            self._succeeded.clear()
            self._failed.clear()

    def summary(self) -> dict:
        with self._lock:
            return {"succeeded": len(self._succeeded), "failed": len(self._failed)}
