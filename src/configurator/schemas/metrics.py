"""Metric profile and sample records."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


class MetricType(str, Enum):
    TIMER = "timer"  # milliseconds
    COUNTER = "counter"


@dataclass
class MetricConfig:
    """One metric a profile may collect."""
    name: str
    type: MetricType
    enabled: bool = True


@dataclass
class MetricsProfile:
    """Named set of metrics; a disabled profile collects nothing."""
    name: str
    metrics: List[MetricConfig] = field(default_factory=list)
    enabled: bool = True


@dataclass
class MetricSample:
    metric_name: str
    metric_type: MetricType
    value: float
    timestamp: str  # ISO-8601
    tags: Dict[str, str] = field(default_factory=dict)  # domain_id, status
