"""
Factory for creating interceptors from configuration
"""

import logging
from typing import Any, Dict, Iterable, List

from .base import NotificationInterceptor
from .errors import ConfigurationError
from .filter import FilterInterceptor
from .python_function import PythonFunctionInterceptor
from .rate_limit import RateLimitInterceptor

logger = logging.getLogger(__name__)


class InterceptorFactory:
    """
    Factory for creating interceptors from configuration

    A configuration entry looks like::

        {"type": "filter", "name": "only-alerts", "priority": 10,
         "config": {"allow_identifiers": ["alerts-*"]}}
    """

    def __init__(self):
        # Registry of interceptor types
        self.registry: Dict[str, type] = {
            'filter': FilterInterceptor,
            'rate_limit': RateLimitInterceptor,
            'ratelimit': RateLimitInterceptor,  # Alias
            'python_function': PythonFunctionInterceptor,
            'pyfunc': PythonFunctionInterceptor,  # Alias
        }

    def create(self, config: Dict[str, Any]) -> NotificationInterceptor:
        """
        Create interceptor from configuration

        Args:
            config: Interceptor configuration with 'type' field

        Returns:
            Interceptor instance

        Raises:
            ConfigurationError: on a missing or unknown type, or when the
                interceptor rejects its configuration
        """
        if not isinstance(config, dict):
            raise ConfigurationError(f"Interceptor configuration must be a mapping, got {config!r}")

        interceptor_type = config.get('type')
        if not interceptor_type:
            raise ConfigurationError("Interceptor configuration missing 'type' field")

        interceptor_type = str(interceptor_type).lower()
        if interceptor_type not in self.registry:
            raise ConfigurationError(f"Unknown interceptor type: {interceptor_type}")

        # Top-level name/priority/enabled override the nested config
        nested = config.get('config') or {}
        if not isinstance(nested, dict):
            raise ConfigurationError(
                f"Interceptor {interceptor_type} 'config' must be a mapping, got {nested!r}"
            )
        interceptor_config = dict(nested)
        for key in ('name', 'priority', 'enabled'):
            if key in config:
                interceptor_config[key] = config[key]

        try:
            interceptor = self.registry[interceptor_type](interceptor_config)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(
                f"Error creating interceptor {interceptor_type}: {e}"
            ) from e

        logger.debug(f"Created {interceptor_type} interceptor {interceptor.name}")
        return interceptor

    def create_all(self, configs: Iterable[Dict[str, Any]]) -> List[NotificationInterceptor]:
        """Create interceptors for every configuration entry, in order"""
        return [self.create(config) for config in configs]

    def register(self, name: str, interceptor_class: type) -> None:
        """
        Register custom interceptor type

        Args:
            name: Name for the interceptor type
            interceptor_class: NotificationInterceptor subclass
        """
        if not (isinstance(interceptor_class, type)
                and issubclass(interceptor_class, NotificationInterceptor)):
            raise ConfigurationError(
                f"{interceptor_class!r} is not a NotificationInterceptor subclass"
            )
        self.registry[name.lower()] = interceptor_class
        logger.info(f"Registered interceptor type: {name}")

    @property
    def types(self) -> List[str]:
        return sorted(self.registry)
