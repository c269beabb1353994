"""Configurator package root.

The public API surface is the :class:`Configurator` engine, the handler and
transport interfaces, and the schema types exposed in
``configurator.schemas``.
"""

__version__ = "0.1.0"

from configurator.engine import CompletionSink, CompletionTracker, Configurator  # noqa: F401
from configurator.handler import ArtifactHandler, BusHandler, DispatchRequest  # noqa: F401
from configurator.bus import BusTransport, LoopbackBus  # noqa: F401
from configurator.runtime import ConfiguratorCallback, RunStatistics, StampCache  # noqa: F401
from configurator.schemas import *  # noqa: F401,F403
from configurator.schemas import __all__ as SCHEMA_EXPORTS

__all__ = [
    "__version__",
    "Configurator",
    "CompletionSink",
    "CompletionTracker",
    "ArtifactHandler",
    "BusHandler",
    "DispatchRequest",
    "BusTransport",
    "LoopbackBus",
    "ConfiguratorCallback",
    "RunStatistics",
    "StampCache",
] + SCHEMA_EXPORTS
