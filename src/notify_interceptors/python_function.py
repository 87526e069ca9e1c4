"""
Interceptors backed by plain Python callables
"""

import importlib
import importlib.util
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .base import Decision, NotificationInterceptor
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class FunctionInterceptor(NotificationInterceptor):
    """
    Use any ``(request, message) -> bool`` callable as an interceptor

    Example:
        chain.register(FunctionInterceptor(lambda req, msg: req.identifier != "spam"))
    """

    name = "function"

    def __init__(
        self,
        function: Decision,
        config: Optional[Dict[str, Any]] = None
    ):
        if not callable(function):
            raise ConfigurationError(f"Interceptor function is not callable: {function!r}")
        self.function = function
        super().__init__(config)
        if 'name' not in self.config:
            self.name = getattr(function, '__name__', self.name)

    def process(self, request: Any, message: Any) -> bool:
        return bool(self.function(request, message))


def load_function(
    function: Optional[str] = None,
    module_path: Optional[str] = None,
    function_name: str = 'process'
) -> Callable:
    """
    Resolve a decision function

    Args:
        function: Import path, ``package.module:func`` or ``package.module.func``
        module_path: Path to a ``.py`` file, used when ``function`` is not set
        function_name: Function to pick from ``module_path``

    Returns:
        The callable

    Raises:
        ConfigurationError: if the function cannot be imported
    """
    if function:
        if ':' in function:
            module_name, _, attr = function.partition(':')
        else:
            module_name, _, attr = function.rpartition('.')

        if not module_name or not attr:
            raise ConfigurationError(f"Invalid function path: {function}")

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ConfigurationError(f"Cannot import module {module_name}: {e}") from e

    elif module_path:
        path = Path(module_path).expanduser()
        if not path.exists():
            raise ConfigurationError(f"Module file not found: {path}")

        spec = importlib.util.spec_from_file_location(f"notify_custom_{path.stem}", path)
        if spec is None or spec.loader is None:
            raise ConfigurationError(f"Cannot load module from {path}")

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise ConfigurationError(f"Failed to load module {path}: {e}") from e
        attr = function_name

    else:
        raise ConfigurationError("python_function interceptor needs 'function' or 'module_path'")

    func = getattr(module, attr, None)
    if func is None:
        raise ConfigurationError(f"Function {attr} not found in {module.__name__}")
    if not callable(func):
        raise ConfigurationError(f"{module.__name__}.{attr} is not callable")

    logger.debug(f"Loaded interceptor function {module.__name__}.{attr}")
    return func


class PythonFunctionInterceptor(FunctionInterceptor):
    """
    Decision function loaded from configuration

    Config keys: ``function`` (import path) or ``module_path`` plus
    ``function_name`` (defaults to ``process``).
    """

    name = "python_function"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        function = load_function(
            function=config.get('function'),
            module_path=config.get('module_path'),
            function_name=config.get('function_name', 'process'),
        )
        super().__init__(function, config)
