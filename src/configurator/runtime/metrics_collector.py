"""Metrics collector for recording configurator metrics."""

from datetime import datetime
from zoneinfo import ZoneInfo
from typing import Dict, List, Optional

from configurator.schemas import MetricSample, MetricType, MetricsProfile


class MetricsCollector:
    """Collects and stores metric samples."""

    def __init__(self, profile: Optional[MetricsProfile] = None):
        """Initialize metrics collector.

        Args:
            profile: Optional metrics profile (uses default if None)
        """
        from configurator.metrics_loader import get_default_profile

        self.profile = profile or get_default_profile()
        self.samples: List[MetricSample] = []

        self.enabled_metrics = {
            m.name: m for m in self.profile.metrics if m.enabled
        } if self.profile.enabled else {}

    def is_enabled(self, metric_name: str) -> bool:
        """Check if a metric is enabled for collection."""
        return metric_name in self.enabled_metrics

    def _record(
        self,
        metric_name: str,
        metric_type: MetricType,
        value: float,
        tags: Optional[Dict[str, str]],
    ) -> None:
        if not self.is_enabled(metric_name):
            return
        self.samples.append(MetricSample(
            metric_name=metric_name,
            metric_type=metric_type,
            value=value,
            timestamp=datetime.now(ZoneInfo("UTC")).isoformat(),
            tags=tags or {},
        ))

    def record_timer(self, metric_name: str, duration_ms: float, tags: Optional[Dict[str, str]] = None) -> None:
        """Record a timer metric (duration in milliseconds)."""
        self._record(metric_name, MetricType.TIMER, duration_ms, tags)

    def record_counter(self, metric_name: str, count: int = 1, tags: Optional[Dict[str, str]] = None) -> None:
        self._record(metric_name, MetricType.COUNTER, float(count), tags)

    def get_samples(
        self,
        metric_name: Optional[str] = None,
        metric_type: Optional[MetricType] = None
    ) -> List[MetricSample]:
        """Get metric samples, optionally filtered by name and type."""
        samples = self.samples

        if metric_name:
            samples = [s for s in samples if s.metric_name == metric_name]

        if metric_type:
            samples = [s for s in samples if s.metric_type == metric_type]

        return samples
