"""
Notification dispatch: run the interceptor chain, then hand accepted
notifications to the application
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

from notify_interceptors import ChainResult, InterceptorChain

from .message import NotificationMessage, NotificationRequest, parse_notification

logger = logging.getLogger(__name__)

NotificationHandler = Callable[[NotificationRequest, NotificationMessage], Any]


@dataclass
class DispatchStats:
    """Dispatcher counters"""
    received: int = 0
    accepted: int = 0
    discarded: int = 0
    handler_errors: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'received': self.received,
            'accepted': self.accepted,
            'discarded': self.discarded,
            'handler_errors': self.handler_errors,
        }


class NotificationDispatcher:
    """
    Drives the interceptor chain for every inbound notification

    Accepted notifications are passed to ``handler``; discarded ones are
    dropped. A failing handler is logged and counted, it never takes the
    transport down.
    """

    def __init__(
        self,
        chain: InterceptorChain,
        handler: Optional[NotificationHandler] = None
    ):
        self.chain = chain
        self.handler = handler
        self._stats = DispatchStats()
        self._lock = threading.Lock()

    def dispatch(
        self,
        request: NotificationRequest,
        message: Optional[NotificationMessage] = None
    ) -> ChainResult:
        """
        Run a notification through the chain

        Args:
            request: Inbound notification
            message: Message for the application, empty if not given

        Returns:
            Chain result
        """
        if message is None:
            message = NotificationMessage()

        logger.debug(f"Dispatching notification for {request.identifier}")
        result = self.chain.run_all(request, message)

        with self._lock:
            self._stats.received += 1
            if result.accepted:
                self._stats.accepted += 1
            else:
                self._stats.discarded += 1

        if not result.accepted:
            logger.info(
                f"Discarded notification for {request.identifier} "
                f"(rejected by {result.rejected_by})"
            )
            return result

        if self.handler is not None:
            try:
                self.handler(request, message)
            except Exception as e:
                logger.error(
                    f"Error handling notification for {request.identifier}: {e}",
                    exc_info=True
                )
                with self._lock:
                    self._stats.handler_errors += 1

        return result

    def dispatch_raw(
        self,
        identifier: str,
        body: Union[bytes, str, None],
        headers: Optional[Mapping[str, str]] = None
    ) -> ChainResult:
        """
        Parse a raw notification body and dispatch it

        Raises:
            NotificationParseError: if the body is malformed JSON
        """
        request = parse_notification(identifier, body, headers)
        return self.dispatch(request)

    def stats(self) -> Dict[str, int]:
        """Get dispatcher counters"""
        with self._lock:
            return self._stats.to_dict()
