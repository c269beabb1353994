"""Schema exports."""

from .base import SchemaBase
from .event import Event, EventType
from .metrics import MetricType, MetricConfig, MetricsProfile, MetricSample
from .outcome import Outcome, OutcomeKind, RunMode, StatusCode
from .settings import CacheConfig, DomainConfig, SettingsManifest

__all__ = [
    "SchemaBase",
    "Event",
    "EventType",
    "MetricType",
    "MetricConfig",
    "MetricsProfile",
    "MetricSample",
    "Outcome",
    "OutcomeKind",
    "RunMode",
    "StatusCode",
    "CacheConfig",
    "DomainConfig",
    "SettingsManifest",
]
