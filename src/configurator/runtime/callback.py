"""Single-shot response callback created for every dispatched artifact."""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Any, Callable, Optional

from configurator.exceptions import CallbackStateError
from configurator.schemas import StatusCode

if TYPE_CHECKING:
    from configurator.engine import Configurator
    from configurator.handler import ArtifactHandler

logger = logging.getLogger(__name__)


class ConfiguratorCallback:
    """Continuation invoked by the transport with an artifact's response.

    The callback only keeps a weak reference to its configurator; if the
    configurator has been discarded by the time the response arrives, the
    response is dropped. The first invocation cancels the transport
    subscription, later ones are refused.

    Response handling runs in this order:
        1. the handler's ``custom_response`` hook,
        2. the configurator's default handling (unless the hook already
           delegated),
        3. any stamp update the hook requested, when the default handling
           did not already update the stamp.
    """

    def __init__(self, configurator: "Configurator", artifact_path: str, handler: "ArtifactHandler"):
        self._configurator = weakref.ref(configurator)
        self.path = artifact_path
        self.handler = handler
        self._cancel: Optional[Callable[[], None]] = None
        self._invoked = False
        self._delegated = False
        self._configure = False
        self._unconfigure = False
        self._default_cache_used = False

    @property
    def configurator(self) -> Optional["Configurator"]:
        return self._configurator()

    @property
    def invoked(self) -> bool:
        return self._invoked

    @property
    def delegated(self) -> bool:
        return self._delegated

    def attach(self, cancel: Callable[[], None]) -> None:
        """Register the transport's cancellation for this subscription."""
        self._cancel = cancel

    def cancel(self) -> None:
        """Cancel the transport subscription; safe to call repeatedly."""
        cancel, self._cancel = self._cancel, None
        if cancel is not None:
            cancel()

    def mark_configured(self) -> None:
        if self._unconfigure:
            raise CallbackStateError(self.path, "cannot mark an artifact already flagged for unmarking")
        self._configure = True

    def unmark_configured(self) -> None:
        if self._configure:
            raise CallbackStateError(self.path, "cannot unmark an artifact already flagged for marking")
        self._unconfigure = True

    def delegate_response(self, response: Any, status: int = StatusCode.OK) -> int:
        """Run the configurator's default response handling (at most once)."""
        if self._delegated:
            return StatusCode.ACCESS_DENIED
        self._delegated = True
        self._default_cache_used = False

        configurator = self._configurator()
        if configurator is None:
            logger.debug("Dropping response for %s: configurator no longer exists", self.path)
            return StatusCode.OK

        self._default_cache_used = configurator.handle_response(self.path, response, status)
        return StatusCode.OK

    def __call__(self, response: Any, status: int = StatusCode.OK) -> int:
        if self._invoked:
            logger.warning("Duplicate response for %s ignored", self.path)
            return StatusCode.ACCESS_DENIED
        self._invoked = True
        self.cancel()

        configurator = self._configurator()
        if configurator is None:
            logger.debug("Dropping response for %s: configurator no longer exists", self.path)
            return StatusCode.OK

        result = StatusCode.OK
        try:
            custom = getattr(self.handler, "custom_response", None)
            outcome = custom(self, response, status) if custom is not None else None
            if outcome is not None and not outcome.is_accepted:
                result = outcome.code
        except Exception as exc:
            logger.error("Uncaught exception handling response for %s: %s", self.path, exc, exc_info=True)
            result = StatusCode.INTERNAL

        if not self._delegated:
            try:
                result = self.delegate_response(response, status if result == StatusCode.OK else result)
            except Exception as exc:
                logger.error("Uncaught exception in default response for %s: %s", self.path, exc, exc_info=True)
                result = StatusCode.INTERNAL

        if not self._default_cache_used:
            try:
                if self._unconfigure:
                    logger.debug("Unmarking %s as applied", self.path)
                    configurator.cache.unmark_applied(self.path)
                elif self._configure:
                    logger.debug("Marking %s as applied", self.path)
                    configurator.cache.mark_applied(self.path)
            except Exception as exc:
                logger.error("Failed to update stamp for %s: %s", self.path, exc, exc_info=True)
                result = StatusCode.INTERNAL
        return result
