"""Configurator engine: scans a domain's artifacts and applies them one at a time."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union

import yaml

from .handler import ArtifactHandler, DispatchRequest, HandlerFactory
from .runtime.callback import ConfiguratorCallback
from .runtime.scanner import DirectoryScanner
from .runtime.stamp_cache import StampCache
from .runtime.stats import RunStatistics
from .schemas import Outcome, RunMode, StatusCode
from .telemetry import TelemetryBus

logger = logging.getLogger(__name__)


class CompletionSink(Protocol):
    def on_engine_complete(self, engine: "Configurator") -> None:
        """Called exactly once, after the engine's queue and pending set are empty."""
        ...


class CompletionTracker:
    """Completion sink that remembers which configurators finished."""

    def __init__(self):
        self.completed: List["Configurator"] = []

    def on_engine_complete(self, engine: "Configurator") -> None:
        logger.debug("%s :: complete", engine.name)
        self.completed.append(engine)

    def is_complete(self, engine: "Configurator") -> bool:
        return any(e is engine for e in self.completed)


def parse_artifact(path: str, text: str) -> Any:
    """Parse artifact content: YAML for .yaml/.yml files, JSON otherwise.

    Raises:
        ValueError: if the content is not valid JSON/YAML
    """
    if Path(path).suffix.lower() in {".yaml", ".yml"}:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(str(exc)) from exc
    return json.loads(text)


class Configurator:
    """Applies the artifacts found under ``config_dir`` for one domain.

    ``run()`` scans the directory once, then hands artifacts to handlers one
    at a time (last discovered first). Synchronous outcomes are resolved on
    the spot and the loop moves on; an accepted dispatch suspends the loop
    until its callback delivers the response, which resumes ``run()``. At
    most one artifact is ever pending.
    """

    def __init__(
        self,
        domain_id: str,
        config_dir: str,
        handlers: Union[HandlerFactory, ArtifactHandler],
        cache: StampCache,
        mode: RunMode = RunMode.APPLY,
        stats: Optional[RunStatistics] = None,
        completion_sink: Optional[CompletionSink] = None,
        telemetry: Optional[TelemetryBus] = None,
    ):
        """Initialize a configurator.

        Args:
            domain_id: Identifier of the configuration domain
            config_dir: Root directory holding the domain's artifacts
            handlers: Factory returning the handler for an artifact path, or a
                single handler (any object with ``process_apply``) used for
                every artifact
            cache: Stamp cache deciding which artifacts are already applied
            mode: Apply, reapply or remove
            stats: Shared success/failure records (a private one if None)
            completion_sink: Notified once when the engine is done
            telemetry: Optional event bus
        """
        if hasattr(handlers, "process_apply"):
            single = handlers
            handlers = lambda _path: single  # noqa: E731
        self.domain_id = domain_id
        self.config_dir = config_dir
        self.handler_factory: HandlerFactory = handlers
        self.cache = cache
        self.mode = RunMode(mode)
        self.stats = stats if stats is not None else RunStatistics()
        self.completion_sink = completion_sink
        self.telemetry = telemetry

        self._queue: List[str] = []
        self._pending: List[str] = []
        self._parents: Dict[str, str] = {}
        self._scanned = False
        self._completed = False
        self._is_empty = False
        self._stepping = False
        self._resume_requested = False

    @property
    def name(self) -> str:
        return self.domain_id

    @property
    def queue(self) -> List[str]:
        """Artifacts still waiting for dispatch; the last one is next."""
        return list(self._queue)

    @property
    def pending(self) -> List[str]:
        return list(self._pending)

    @property
    def scanned(self) -> bool:
        return self._scanned

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def is_empty(self) -> bool:
        return self._is_empty

    def parent_id(self, artifact_path: str) -> str:
        """Owner of an artifact: its parent directory name, or the domain id at top level."""
        return self._parents.get(artifact_path) or self.domain_id

    def run(self) -> bool:
        """Advance the engine; returns True once nothing is left to dispatch.

        Safe to call at any time. A call made while a dispatch is already on
        the stack (a response delivered synchronously) only asks the active
        loop to continue.
        """
        if self._stepping:
            self._resume_requested = True
            return not self._queue

        self._stepping = True
        try:
            return self._drain()
        finally:
            self._stepping = False

    def _drain(self) -> bool:
        if not self._scanned:
            self._scan()

        while True:
            if not self._queue:
                if not self._pending and not self._completed:
                    if not self._is_empty:
                        logger.debug("%s :: No more artifacts", self.name)
                    self._complete()
                else:
                    logger.debug(
                        "%s :: %d artifacts pending, completed = %s",
                        self.name, len(self._pending), self._completed,
                    )
                return True

            if self._pending:
                logger.debug("%s :: waiting for response to '%s'", self.name, self._pending[0])
                return False

            path = self._queue.pop()
            self._pending.append(path)
            self._resume_requested = False
            logger.debug("%s :: Configuring '%s'", self.name, path)

            outcome = self._dispatch(path)
            if outcome.is_accepted:
                if self._resume_requested:
                    # response already handled while dispatching
                    continue
                return not self._queue
            if path not in self._pending:
                # resolved by its own response while dispatching
                continue

            if outcome.is_advisory_skip:
                logger.debug("Skipping artifact: %s", path)
                self.stats.record_success(path)
                if self.telemetry:
                    self.telemetry.artifact_skipped(self.domain_id, path)
            else:
                logger.error("Failed to process artifact: %s (error: %s)", path, outcome.describe())
                self.stats.record_failure(path)
                if self.telemetry:
                    self.telemetry.artifact_failed(self.domain_id, path, outcome.describe())
            self._discard_pending(path)

    def _scan(self) -> None:
        scanner = DirectoryScanner(self.cache, self.mode)
        result = scanner.scan(self.config_dir)
        self._queue = list(result.discovered)
        self._parents = dict(result.parents)
        self._is_empty = not self._queue
        if self._is_empty and result.root_found:
            logger.debug("No artifacts found in %s", self.config_dir)
        self._scanned = True
        if self.telemetry:
            self.telemetry.engine_scanned(self.domain_id, self.config_dir, len(self._queue), result.root_found)

    def _dispatch(self, path: str) -> Outcome:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return Outcome.failure(StatusCode.IO, str(exc))
        try:
            artifact = parse_artifact(path, text)
        except ValueError as exc:
            return Outcome.failure(StatusCode.PARSE, str(exc))

        try:
            handler = self.handler_factory(path)
            request = DispatchRequest(
                path=path,
                artifact=artifact,
                parent_id=self.parent_id(path),
                mode=self.mode,
                callback=self.create_callback(path, handler),
            )
            if self.telemetry:
                self.telemetry.artifact_dispatched(self.domain_id, path, self.mode.value)
            if self.mode == RunMode.REMOVE:
                outcome = handler.process_removal(request)
            else:
                outcome = handler.process_apply(request)
        except Exception as exc:
            logger.error("Uncaught exception processing %s: %s", path, exc, exc_info=True)
            return Outcome.failure(StatusCode.INTERNAL, str(exc))

        if outcome is None:
            return Outcome.failure(StatusCode.INTERNAL, "handler returned no outcome")
        return outcome

    def create_callback(self, path: str, handler: ArtifactHandler) -> ConfiguratorCallback:
        return ConfiguratorCallback(self, path, handler)

    def handle_response(self, path: str, response: Any, status: int) -> bool:
        """Default handling of an asynchronous response.

        Records the result, updates the stamp on success and resumes the
        engine. Returns True when the stamp was updated here. The engine is
        resumed even when the bookkeeping raises; the exception then
        propagates to the callback.
        """
        if not self._discard_pending(path):
            logger.warning("Response for %s but not in pending list", path)
        else:
            logger.debug("Response for %s - removing from pending list", path)

        success = True
        if isinstance(response, Mapping):
            success = bool(response.get("returnValue", True))

        try:
            if status != StatusCode.OK or not success:
                self.stats.record_failure(path)
                logger.error("%s: %s (status: %s)", path, json.dumps(response, default=str), status)
                if self.telemetry:
                    self.telemetry.artifact_failed(self.domain_id, path, f"status {status}")
                return False

            self.stats.record_success(path)
            if self.mode != RunMode.REMOVE:
                self.cache.mark_applied(path)
            else:
                self.cache.unmark_applied(path)
            if self.telemetry:
                self.telemetry.artifact_succeeded(self.domain_id, path)
            return True
        finally:
            self.run()

    def _discard_pending(self, path: str) -> bool:
        try:
            self._pending.remove(path)
        except ValueError:
            return False
        return True

    def _complete(self) -> None:
        self._completed = True
        if self.telemetry:
            summary = self.stats.summary()
            self.telemetry.engine_completed(self.domain_id, summary["succeeded"], summary["failed"])
        if self.completion_sink is not None:
            self.completion_sink.on_engine_complete(self)
