"""
Notification Interceptor Framework
"""

from .base import NotificationInterceptor, guard
from .chain import InterceptorChain, ChainResult, build_chain
from .errors import (
    InterceptorError,
    ConfigurationError,
    ChainNotConfiguredError,
    RegistrationError,
    DuplicateInterceptorError,
    ChainFrozenError,
)
from .filter import FilterInterceptor, FilterCondition, FilterType
from .rate_limit import RateLimitInterceptor, RateLimit
from .python_function import FunctionInterceptor, PythonFunctionInterceptor
from .factory import InterceptorFactory

__all__ = [
    "NotificationInterceptor",
    "guard",
    "InterceptorChain",
    "ChainResult",
    "build_chain",
    "InterceptorError",
    "ConfigurationError",
    "ChainNotConfiguredError",
    "RegistrationError",
    "DuplicateInterceptorError",
    "ChainFrozenError",
    "FilterInterceptor",
    "FilterCondition",
    "FilterType",
    "RateLimitInterceptor",
    "RateLimit",
    "FunctionInterceptor",
    "PythonFunctionInterceptor",
    "InterceptorFactory",
]
