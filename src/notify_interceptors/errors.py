"""
Errors raised while configuring and registering interceptors
"""


class InterceptorError(Exception):
    """Base class for interceptor framework errors"""


class ConfigurationError(InterceptorError):
    """Interceptor or chain is misconfigured"""


class ChainNotConfiguredError(ConfigurationError):
    """Interceptor registered before a chain was set"""

    def __init__(self, interceptor_name: str):
        super().__init__(
            f"Interceptor '{interceptor_name}' has no chain configured; "
            f"call set_chain() before register()"
        )
        self.interceptor_name = interceptor_name


class RegistrationError(InterceptorError):
    """Interceptor could not be added to a chain"""


class DuplicateInterceptorError(RegistrationError):
    """Same interceptor instance registered twice on a strict chain"""

    def __init__(self, interceptor_name: str):
        super().__init__(f"Interceptor '{interceptor_name}' is already registered")
        self.interceptor_name = interceptor_name


class ChainFrozenError(RegistrationError):
    """Registration attempted after the chain was frozen"""

    def __init__(self, interceptor_name: str):
        super().__init__(
            f"Cannot register '{interceptor_name}': chain is frozen"
        )
        self.interceptor_name = interceptor_name
