"""Runtime exports."""

from configurator.runtime.callback import ConfiguratorCallback
from configurator.runtime.metrics_collector import MetricsCollector
from configurator.runtime.scanner import DirectoryScanner, ScanResult
from configurator.runtime.stamp_cache import StampCache
from configurator.runtime.stats import RunStatistics

__all__ = [
    "ConfiguratorCallback",
    "MetricsCollector",
    "DirectoryScanner",
    "ScanResult",
    "StampCache",
    "RunStatistics",
]
