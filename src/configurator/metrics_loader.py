"""Metrics loader and configuration."""

import os
import yaml
from typing import Dict, List, Optional
from configurator.schemas import MetricsProfile, MetricConfig, MetricType
from configurator.exceptions import ManifestLoadError

# Metrics emitted by TelemetryBus.
DEFAULT_METRICS = {
    "artifact_response_duration": MetricType.TIMER,  # dispatch to response
    "engine_total_duration": MetricType.TIMER,  # scan to completion
    "artifact_dispatch_count": MetricType.COUNTER,
    "artifact_success_count": MetricType.COUNTER,
    "artifact_failure_count": MetricType.COUNTER,
}


def load_metrics_manifest(config_dir: str) -> Optional[Dict]:
    """Load metrics.yaml (optional).

    Returns:
        Dict with loaded metrics configuration, or None if file doesn't exist
    """
    path = os.path.join(config_dir, "metrics.yaml")
    if not os.path.exists(path):
        return None

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return data if data else None
    except yaml.YAMLError as e:
        raise ManifestLoadError("metrics.yaml", f"Invalid YAML: {e}")
    except OSError as e:
        raise ManifestLoadError("metrics.yaml", str(e))


def parse_metrics(data: Optional[Dict]) -> List[MetricsProfile]:
    """Parse loaded metrics YAML into MetricsProfile objects.

    Expected format:
    profiles:
      - name: "quiet"
        enabled: true
        metrics:
          - name: "artifact_response_duration"
            type: "timer"
          - name: "artifact_failure_count"
            type: "counter"
            enabled: false
    """
    if not data or "profiles" not in data:
        return [get_default_profile()]

    profiles = []
    for profile_data in data["profiles"]:
        try:
            metrics = [
                MetricConfig(
                    name=metric_data["name"],
                    type=MetricType(metric_data["type"]),
                    enabled=metric_data.get("enabled", True),
                )
                for metric_data in profile_data.get("metrics", [])
            ]
            profiles.append(MetricsProfile(
                name=profile_data["name"],
                metrics=metrics,
                enabled=profile_data.get("enabled", True)
            ))
        except (KeyError, ValueError) as e:
            raise ManifestLoadError("metrics.yaml", f"Invalid profile entry: {e}")

    return profiles


def get_default_profile() -> MetricsProfile:
    """Profile collecting every metric the telemetry bus emits."""
    return MetricsProfile(
        name="default",
        metrics=[MetricConfig(name=name, type=kind) for name, kind in DEFAULT_METRICS.items()],
    )
