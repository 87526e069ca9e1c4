"""
Notification gateway - parses inbound notifications and drives the
interceptor chain
"""

from .config import (
    GatewayConfig,
    build_chain_from_config,
    get_profile_config,
    load_config,
    validate_config,
)
from .dispatcher import NotificationDispatcher, DispatchStats
from .message import (
    NotificationMessage,
    NotificationParseError,
    NotificationRequest,
    message_from_dict,
    parse_notification,
)

__version__ = "1.0.0"

__all__ = [
    "GatewayConfig",
    "build_chain_from_config",
    "get_profile_config",
    "load_config",
    "validate_config",
    "NotificationDispatcher",
    "DispatchStats",
    "NotificationMessage",
    "NotificationParseError",
    "NotificationRequest",
    "message_from_dict",
    "parse_notification",
]
