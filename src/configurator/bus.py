"""Bus transport interface and an in-process loopback transport."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Deque, List, Optional, Protocol, Tuple, Union

from configurator.schemas import Outcome, StatusCode

if TYPE_CHECKING:
    from configurator.runtime.callback import ConfiguratorCallback

logger = logging.getLogger(__name__)

Response = Tuple[Any, int]
Responder = Callable[[str, str, Any], Union[Outcome, Response]]


class BusTransport(Protocol):
    def dispatch(self, domain: str, path: str, artifact: Any, callback: "ConfiguratorCallback") -> Outcome:
        """Send an artifact; an accepted outcome promises exactly one callback invocation."""
        ...


def _always_succeed(domain: str, path: str, artifact: Any) -> Response:
    return {"returnValue": True}, StatusCode.OK


@dataclass
class _Delivery:
    callback: "ConfiguratorCallback"
    response: Any
    status: int
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class SentMessage:
    domain: str
    path: str
    artifact: Any


@dataclass
class LoopbackBus:
    """Transport that answers requests in-process.

    The responder decides the fate of each dispatch: returning an
    :class:`Outcome` resolves it synchronously (an accepted outcome queues a
    plain success response), returning ``(response, status)`` queues that
    response. Queued responses are delivered in dispatch order by
    :meth:`deliver_next` / :meth:`run_until_idle`.
    """

    responder: Responder = field(default=_always_succeed)
    sent: List[SentMessage] = field(default_factory=list)

    def __post_init__(self):
        self._deliveries: Deque[_Delivery] = deque()

    def dispatch(self, domain: str, path: str, artifact: Any, callback: "ConfiguratorCallback") -> Outcome:
        self.sent.append(SentMessage(domain=domain, path=path, artifact=artifact))
        try:
            result = self.responder(domain, path, artifact)
        except Exception as exc:
            logger.error("Responder for %s failed on %s: %s", domain, path, exc)
            return Outcome.failure(StatusCode.TRANSPORT, str(exc))

        if isinstance(result, Outcome):
            if not result.is_accepted:
                return result
            result = _always_succeed(domain, path, artifact)

        response, status = result
        delivery = _Delivery(callback=callback, response=response, status=int(status))
        callback.attach(delivery.cancel)
        self._deliveries.append(delivery)
        logger.debug("Queued response for %s on %s", path, domain)
        return Outcome.accepted()

    @property
    def pending_count(self) -> int:
        return sum(1 for d in self._deliveries if not d.cancelled)

    def deliver_next(self) -> bool:
        """Deliver the oldest live response. Returns False when none is queued."""
        while self._deliveries:
            delivery = self._deliveries.popleft()
            if delivery.cancelled:
                continue
            delivery.callback(delivery.response, delivery.status)
            return True
        return False

    def run_until_idle(self, limit: Optional[int] = None) -> int:
        """Deliver responses until the queue drains (or ``limit`` is hit)."""
        delivered = 0
        while limit is None or delivered < limit:
            if not self.deliver_next():
                break
            delivered += 1
        return delivered
