"""Telemetry and metrics tests."""

import tempfile
from pathlib import Path

import pytest

from configurator import Configurator, LoopbackBus, Outcome, RunStatistics, StatusCode
from configurator.exceptions import ManifestLoadError
from configurator.metrics_loader import get_default_profile, load_metrics_manifest, parse_metrics
from configurator.runtime import MetricsCollector
from configurator.runtime.stamp_cache import StampCache
from configurator.schemas import EventType, MetricType
from configurator.telemetry import TelemetryBus
from tests.helpers.handlers import RecordingHandler, write_artifacts


@pytest.fixture
def telemetry():
    return TelemetryBus(metrics_collector=MetricsCollector())


def _names(events):
    return [e.payload["event"] for e in events]


class TestEngineTelemetry:
    def test_events_for_full_run(self, tmp_path, telemetry):
        """Test a run emits scan, dispatch, result and completion events."""
        root = tmp_path / "conf"
        write_artifacts(root, {"a.json": {}, "b.json": {}, "c.json": {}})
        bus = LoopbackBus(responder=lambda d, p, a: ({"returnValue": not p.endswith("a.json")}, 0))
        handler = RecordingHandler(bus, outcomes={"b.json": Outcome.advisory_skip()})
        engine = Configurator(
            "kinds", str(root), handler, StampCache(tmp_path / "cache"),
            stats=RunStatistics(), telemetry=telemetry,
        )
        engine.run()
        bus.run_until_idle()

        names = _names(telemetry.events_for("kinds"))
        assert names[0] == "engine_scanned"
        assert names[-1] == "engine_completed"
        assert names.count("artifact_dispatched") == 3
        assert "artifact_skipped" in names
        assert "artifact_succeeded" in names
        failed = [e for e in telemetry.events if e.payload["event"] == "artifact_failed"]
        assert len(failed) == 1 and failed[0].type == EventType.ERROR
        assert telemetry.events[-1].payload == {"event": "engine_completed", "succeeded": 2, "failed": 1}

    def test_metrics_recorded(self, tmp_path, telemetry):
        root = tmp_path / "conf"
        write_artifacts(root, {"a.json": {}, "b.json": {}})
        bus = LoopbackBus()
        handler = RecordingHandler(bus, outcomes={"a.json": Outcome.failure(StatusCode.INTERNAL)})
        Configurator("kinds", str(root), handler, StampCache(tmp_path / "cache"), telemetry=telemetry).run()
        bus.run_until_idle()

        collector = telemetry.metrics_collector
        assert len(collector.get_samples("artifact_dispatch_count")) == 2
        assert len(collector.get_samples("artifact_success_count")) == 1
        assert len(collector.get_samples("artifact_failure_count")) == 1
        assert len(collector.get_samples(metric_type=MetricType.TIMER)) >= 2
        assert len(collector.get_samples("engine_total_duration")) == 1


class TestMetricsLoader:
    def test_missing_manifest(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            assert load_metrics_manifest(tmpdir) is None

    def test_parse_profiles(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "metrics.yaml").write_text(
                """
profiles:
  - name: "quiet"
    metrics:
      - name: "artifact_failure_count"
        type: "counter"
      - name: "artifact_response_duration"
        type: "timer"
        enabled: false
"""
            )
            profiles = parse_metrics(load_metrics_manifest(tmpdir))
        assert profiles[0].name == "quiet"
        collector = MetricsCollector(profiles[0])
        assert collector.is_enabled("artifact_failure_count")
        assert not collector.is_enabled("artifact_response_duration")

    def test_invalid_yaml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "metrics.yaml").write_text("profiles: [")
            with pytest.raises(ManifestLoadError):
                load_metrics_manifest(tmpdir)

    def test_bad_metric_type(self):
        with pytest.raises(ManifestLoadError):
            parse_metrics({"profiles": [{"name": "x", "metrics": [{"name": "m", "type": "histogram"}]}]})

    def test_default_profile(self):
        assert parse_metrics(None)[0].name == get_default_profile().name
        assert MetricsCollector().is_enabled("artifact_dispatch_count")

    def test_disabled_profile_records_nothing(self):
        profile = get_default_profile()
        profile.enabled = False
        collector = MetricsCollector(profile)
        collector.record_counter("artifact_dispatch_count")
        assert collector.get_samples() == []
