"""Handler capability implemented per artifact domain.

A configurator never interprets artifacts itself. For every dispatch it asks
its handler factory for an :class:`ArtifactHandler`, hands it a
:class:`DispatchRequest` and reacts to the returned
:class:`~configurator.schemas.Outcome`:

- ``accepted``: the handler queued asynchronous work and the request's
  callback will be invoked exactly once with the response.
- ``advisory_skip``: nothing more will happen for this artifact; count it
  as succeeded.
- ``failure``: count it as failed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from configurator.schemas import Outcome, RunMode, StatusCode

if TYPE_CHECKING:
    from configurator.bus import BusTransport
    from configurator.runtime.callback import ConfiguratorCallback


@dataclass
class DispatchRequest:
    """Everything a handler needs to process one artifact."""
    path: str
    artifact: Any  # parsed JSON/YAML content
    parent_id: str
    mode: RunMode
    callback: "ConfiguratorCallback"


class ArtifactHandler(ABC):
    """Per-domain processing hooks."""

    @abstractmethod
    def domain_name(self) -> str:
        """Name used in log lines."""

    @abstractmethod
    def process_apply(self, request: DispatchRequest) -> Outcome:
        """Apply (or reapply) an artifact."""

    @abstractmethod
    def process_removal(self, request: DispatchRequest) -> Outcome:
        """Undo a previously applied artifact."""

    def custom_response(self, callback: "ConfiguratorCallback", response: Any, status: int) -> Outcome:
        """Inspect an asynchronous response before the default handling runs.

        Overrides may request a stamp update with ``callback.mark_configured()``
        or ``callback.unmark_configured()``, or take over the default path by
        calling ``callback.delegate_response()`` themselves. A failure outcome
        (or an exception) turns the response into a failed one.
        """
        return Outcome.accepted()


HandlerFactory = Callable[[str], ArtifactHandler]


class BusHandler(ArtifactHandler):
    """Handler that forwards artifacts to service addresses on a bus transport.

    ``apply_address`` receives apply/reapply dispatches and ``removal_address``
    receives removals. A handler without a removal address refuses removals.
    """

    def __init__(
        self,
        transport: "BusTransport",
        name: str,
        apply_address: str,
        removal_address: Optional[str] = None,
    ):
        self.transport = transport
        self.name = name
        self.apply_address = apply_address
        self.removal_address = removal_address

    def domain_name(self) -> str:
        return self.name

    def process_apply(self, request: DispatchRequest) -> Outcome:
        return self.transport.dispatch(self.apply_address, request.path, request.artifact, request.callback)

    def process_removal(self, request: DispatchRequest) -> Outcome:
        if not self.removal_address:
            return Outcome.failure(StatusCode.ACCESS_DENIED, f"{self.name} does not support removal")
        return self.transport.dispatch(self.removal_address, request.path, request.artifact, request.callback)
