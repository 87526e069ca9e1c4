"""
Base interceptor interface and the fail-closed decision wrapper
"""

from abc import ABC, abstractmethod
from functools import wraps
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING
import logging

from .errors import ChainNotConfiguredError

if TYPE_CHECKING:
    from .chain import InterceptorChain

logger = logging.getLogger(__name__)

Decision = Callable[[Any, Any], bool]


def guard(decide: Decision, name: Optional[str] = None) -> Decision:
    """
    Wrap a decision function so that a fault rejects instead of raising

    Args:
        decide: Callable taking (request, message) and returning a bool
        name: Name used in log records, defaults to the callable's name

    Returns:
        Callable with the same signature. It returns whatever ``decide``
        returns, or False if ``decide`` raised.
    """
    label = name or getattr(decide, '__qualname__', repr(decide))

    @wraps(decide)
    def guarded(request: Any, message: Any) -> bool:
        try:
            return decide(request, message)
        except Exception as e:
            logger.error(
                f"Error processing notification request in {label}: {e}",
                exc_info=True
            )
            return False

    return guarded


class NotificationInterceptor(ABC):
    """
    Base class for interceptors that inspect inbound notifications

    Subclasses implement ``process``. Instances are attached to an
    ``InterceptorChain`` with ``set_chain`` and added to it with
    ``register``; the transport then calls ``intercept`` for every
    inbound request.
    """

    name: str = "base"
    priority: int = 0  # Higher priority runs first; equal priorities keep registration order

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize interceptor

        Args:
            config: Interceptor configuration
        """
        self.config = config or {}
        self.enabled = self.config.get('enabled', True)
        if 'name' in self.config:
            self.name = self.config['name']
        if 'priority' in self.config:
            self.priority = int(self.config['priority'])
        self.interceptor_chain: Optional["InterceptorChain"] = None

    def set_chain(self, chain: "InterceptorChain") -> None:
        self.interceptor_chain = chain

    def register(self) -> None:
        """
        Initialize the interceptor and add it to its chain

        Raises:
            ChainNotConfiguredError: if set_chain() was never called
        """
        if self.interceptor_chain is None:
            raise ChainNotConfiguredError(self.name)

        self.init()
        self.interceptor_chain.register(self)

    def init(self) -> None:
        """
        Initialize interceptor dependencies

        Runs once, right before the interceptor is added to its chain.
        Override to acquire resources.
        """

    def intercept(self, request: Any, message: Any) -> bool:
        """
        Intercept an incoming request

        Args:
            request: Inbound notification request
            message: Message associated with the notification

        Returns:
            True if request processing should proceed, False if the
            request should be discarded. A fault in ``process`` is logged
            and treated as False.
        """
        if not self.enabled:
            return True

        logger.debug(f"{self.name} processing notification request")
        return guard(self.process, self.name)(request, message)

    @abstractmethod
    def process(self, request: Any, message: Any) -> bool:
        """
        Decide whether the request should proceed

        Args:
            request: Inbound notification request
            message: Message associated with the notification

        Returns:
            True if request processing should proceed, False if the
            request should be discarded
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} priority={self.priority}>"
