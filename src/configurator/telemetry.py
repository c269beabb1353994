"""Telemetry/event bus."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional
from zoneinfo import ZoneInfo
import time

from configurator.schemas import Event, EventType, MetricSample

if TYPE_CHECKING:
    from configurator.runtime.metrics_collector import MetricsCollector


def _now_iso() -> str:
    """Generate ISO-8601 timestamp."""
    return datetime.now(ZoneInfo("UTC")).isoformat()


@dataclass
class TelemetryBus:
    events: List[Event] = field(default_factory=list)
    metrics_collector: Optional[MetricsCollector] = field(default=None)

    def __post_init__(self):
        self._dispatch_times: dict[str, float] = {}
        self._engine_start_times: dict[str, float] = {}

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def _event(self, name: str, type: EventType, domain_id: str, artifact_path: Optional[str] = None, **payload) -> None:
        self.emit(Event(
            event_id=f"{name}-{len(self.events)}",
            domain_id=domain_id,
            artifact_path=artifact_path,
            type=type,
            timestamp=_now_iso(),
            payload={"event": name, **payload},
        ))

    def _count(self, metric_name: str, domain_id: str) -> None:
        if self.metrics_collector:
            self.metrics_collector.record_counter(metric_name, tags={"domain_id": domain_id})

    # Engine Events
    def engine_scanned(self, domain_id: str, directory: str, discovered: int, root_found: bool) -> None:
        """Emit engine scanned event and start the engine timer."""
        self._engine_start_times[domain_id] = time.time()
        self._event(
            "engine_scanned", EventType.ENGINE, domain_id,
            directory=directory, discovered=discovered, root_found=root_found,
        )

    def engine_completed(self, domain_id: str, succeeded: int, failed: int) -> None:
        """Emit engine completed event."""
        started = self._engine_start_times.pop(domain_id, None)
        if started is not None and self.metrics_collector:
            self.metrics_collector.record_timer(
                "engine_total_duration",
                (time.time() - started) * 1000,
                tags={"domain_id": domain_id},
            )
        self._event("engine_completed", EventType.ENGINE, domain_id, succeeded=succeeded, failed=failed)

    # Artifact Events
    def artifact_dispatched(self, domain_id: str, artifact_path: str, mode: str) -> None:
        self._dispatch_times[f"{domain_id}:{artifact_path}"] = time.time()
        self._event("artifact_dispatched", EventType.ARTIFACT, domain_id, artifact_path, mode=mode)
        self._count("artifact_dispatch_count", domain_id)

    def artifact_succeeded(self, domain_id: str, artifact_path: str) -> None:
        self._stop_response_timer(domain_id, artifact_path, "ok")
        self._event("artifact_succeeded", EventType.ARTIFACT, domain_id, artifact_path)
        self._count("artifact_success_count", domain_id)

    def artifact_skipped(self, domain_id: str, artifact_path: str) -> None:
        self._dispatch_times.pop(f"{domain_id}:{artifact_path}", None)
        self._event("artifact_skipped", EventType.ARTIFACT, domain_id, artifact_path)
        self._count("artifact_success_count", domain_id)

    def artifact_failed(self, domain_id: str, artifact_path: str, error: str) -> None:
        self._stop_response_timer(domain_id, artifact_path, "failed")
        self._event("artifact_failed", EventType.ERROR, domain_id, artifact_path, error=error)
        self._count("artifact_failure_count", domain_id)

    def _stop_response_timer(self, domain_id: str, artifact_path: str, status: str) -> None:
        started = self._dispatch_times.pop(f"{domain_id}:{artifact_path}", None)
        if started is None or not self.metrics_collector:
            return
        self.metrics_collector.record_timer(
            "artifact_response_duration",
            (time.time() - started) * 1000,
            tags={"domain_id": domain_id, "status": status},
        )

    def events_for(self, domain_id: str) -> List[Event]:
        return [e for e in self.events if e.domain_id == domain_id]

    def get_metrics(self) -> List[MetricSample]:
        """Get all collected metrics."""
        if self.metrics_collector:
            return self.metrics_collector.get_samples()
        return []
