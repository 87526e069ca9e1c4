"""
Interceptor chain implementation for sequential processing
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .base import NotificationInterceptor
from .errors import ChainFrozenError, DuplicateInterceptorError

logger = logging.getLogger(__name__)


@dataclass
class ChainResult:
    """Outcome of running a request through the chain"""
    accepted: bool
    rejected_by: Optional[str] = None  # Name of the interceptor that stopped the chain
    invoked: List[str] = field(default_factory=list)  # Names in invocation order

    @property
    def rejected(self) -> bool:
        return not self.accepted

    def __bool__(self) -> bool:
        return self.accepted


class InterceptorChain:
    """
    Ordered registry of interceptors consulted for every inbound request

    Interceptors run in descending priority; interceptors of equal priority
    run in the order they were registered. The chain does not catch faults,
    that is the job of ``NotificationInterceptor.intercept``.
    """

    def __init__(self, allow_duplicates: bool = True):
        """
        Initialize interceptor chain

        Args:
            allow_duplicates: If False, registering the same instance twice
                raises DuplicateInterceptorError
        """
        self.allow_duplicates = allow_duplicates
        self._interceptors: List[NotificationInterceptor] = []
        self._frozen = False
        self._lock = threading.Lock()

    def register(self, interceptor: NotificationInterceptor) -> None:
        """
        Add interceptor to chain

        Args:
            interceptor: Interceptor to add

        Raises:
            ChainFrozenError: if the chain was frozen
            DuplicateInterceptorError: if the instance is already registered
                and duplicates are not allowed
        """
        with self._lock:
            if self._frozen:
                raise ChainFrozenError(interceptor.name)

            if not self.allow_duplicates and any(i is interceptor for i in self._interceptors):
                raise DuplicateInterceptorError(interceptor.name)

            # Insert after every entry of equal or higher priority
            position = len(self._interceptors)
            while position > 0 and self._interceptors[position - 1].priority < interceptor.priority:
                position -= 1
            self._interceptors.insert(position, interceptor)

        logger.debug(
            f"Registered interceptor {interceptor.name} at position {position}"
        )

    def freeze(self) -> None:
        """End the registration phase; later registrations raise ChainFrozenError"""
        with self._lock:
            self._frozen = True
        logger.info(f"Interceptor chain frozen with {len(self._interceptors)} interceptors")

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def interceptors(self) -> Tuple[NotificationInterceptor, ...]:
        """Snapshot of the registered interceptors in invocation order"""
        with self._lock:
            return tuple(self._interceptors)

    def run_all(self, request: Any, message: Any) -> ChainResult:
        """
        Run request through every interceptor until one rejects it

        Args:
            request: Inbound notification request
            message: Message associated with the notification

        Returns:
            ChainResult, accepted only if every interceptor returned True
        """
        invoked = []

        for interceptor in self.interceptors:
            invoked.append(interceptor.name)

            if not interceptor.intercept(request, message):
                logger.info(f"Notification request rejected by {interceptor.name}")
                return ChainResult(
                    accepted=False,
                    rejected_by=interceptor.name,
                    invoked=invoked
                )

        return ChainResult(accepted=True, invoked=invoked)

    def get(self, name: str) -> Optional[NotificationInterceptor]:
        """
        Get interceptor by name

        Args:
            name: Name of interceptor

        Returns:
            First interceptor with that name, or None
        """
        for interceptor in self.interceptors:
            if interceptor.name == name:
                return interceptor
        return None

    def describe(self) -> List[Dict[str, Any]]:
        """
        List all interceptors in chain

        Returns:
            List of interceptor info
        """
        return [
            {
                'position': position,
                'name': i.name,
                'type': type(i).__name__,
                'priority': i.priority,
                'enabled': i.enabled
            }
            for position, i in enumerate(self.interceptors, start=1)
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._interceptors)

    def __iter__(self) -> Iterator[NotificationInterceptor]:
        return iter(self.interceptors)


def build_chain(
    interceptors: Iterable[NotificationInterceptor],
    allow_duplicates: bool = False
) -> InterceptorChain:
    """
    Build a read-only chain from already constructed interceptors

    Each interceptor is attached to the new chain and registers itself,
    so its ``init`` hook runs. The chain is frozen before it is returned.

    Args:
        interceptors: Interceptors in the order they should be registered
        allow_duplicates: Allow the same instance more than once

    Returns:
        Frozen InterceptorChain
    """
    chain = InterceptorChain(allow_duplicates=allow_duplicates)

    for interceptor in interceptors:
        interceptor.set_chain(chain)
        interceptor.register()

    chain.freeze()
    return chain
