"""
Configuration management for the notification gateway
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from notify_interceptors import InterceptorChain, InterceptorFactory, build_chain
from notify_interceptors.errors import ConfigurationError

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}


class GatewayConfig(BaseModel):
    """Gateway configuration"""
    profile: str = "default"
    log_level: str = "INFO"

    # Interceptor configuration, in registration order
    interceptors: List[Dict[str, Any]] = Field(default_factory=list)
    allow_duplicates: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GatewayConfig':
        """
        Create from dictionary

        Raises:
            ConfigurationError: if the dictionary does not validate
        """
        errors = validate_config(data)
        if errors:
            raise ConfigurationError("Invalid configuration: " + "; ".join(errors))
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


def load_config(path: Path) -> Dict[str, Any]:
    """
    Load configuration from file

    Args:
        path: Path to configuration file (JSON or YAML)

    Returns:
        Configuration dictionary
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        if path.suffix in ('.yaml', '.yml'):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    return data or {}


def validate_config(
    config: Dict[str, Any],
    factory: Optional[InterceptorFactory] = None
) -> List[str]:
    """
    Validate configuration

    Args:
        config: Configuration dictionary
        factory: Factory whose registered types are accepted

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not isinstance(config, dict):
        return [f"Configuration must be a mapping, got {type(config).__name__}"]

    if 'log_level' in config and str(config['log_level']).upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid log_level: {config['log_level']}. Must be one of {sorted(VALID_LOG_LEVELS)}"
        )

    profile = config.get('profile', 'default')
    if not isinstance(profile, str) or profile not in PROFILES:
        errors.append(f"Unknown profile: {profile}. Must be one of {sorted(PROFILES)}")

    if 'allow_duplicates' in config and not isinstance(config['allow_duplicates'], bool):
        errors.append("'allow_duplicates' must be true or false")

    interceptors = config.get('interceptors', [])
    if not isinstance(interceptors, list):
        errors.append("'interceptors' must be a list")
        interceptors = []

    known_types = set((factory or InterceptorFactory()).types)
    for i, interceptor in enumerate(interceptors):
        if not isinstance(interceptor, dict):
            errors.append(f"Interceptor {i} must be a mapping")
            continue
        if 'type' not in interceptor:
            errors.append(f"Interceptor {i} missing 'type' field")
        elif str(interceptor['type']).lower() not in known_types:
            errors.append(f"Interceptor {i} has unknown type: {interceptor['type']}")
        if 'priority' in interceptor and not isinstance(interceptor['priority'], int):
            errors.append(f"Interceptor {i} priority must be an integer")
        if interceptor.get('config') is not None and not isinstance(interceptor['config'], dict):
            errors.append(f"Interceptor {i} 'config' must be a mapping")

    return errors


PROFILES: Dict[str, Dict[str, Any]] = {
    'default': {
        'interceptors': [
            {
                'type': 'rate_limit',
                'config': {'limit': '60/minute'}
            },
            {
                'type': 'filter',
                'config': {'content_types': ['application/json', 'text/plain']}
            }
        ]
    },
    'strict': {
        'interceptors': [
            {
                'type': 'rate_limit',
                'config': {'limit': '10/minute'}
            },
            {
                'type': 'filter',
                'config': {
                    'content_types': ['application/json'],
                    'require_headers': {'X-Signature': None}
                }
            }
        ]
    },
    'open': {
        'interceptors': []
    },
}


def get_default_config() -> Dict[str, Any]:
    """Get default configuration"""
    return GatewayConfig().to_dict()


def get_profile_config(profile: str) -> Dict[str, Any]:
    """
    Get configuration for a specific profile

    Args:
        profile: Profile name (default, strict, open)

    Returns:
        Profile configuration
    """
    if profile not in PROFILES:
        raise ConfigurationError(f"Unknown profile: {profile}")

    config = get_default_config()
    config.update(copy.deepcopy(PROFILES[profile]))
    config['profile'] = profile
    return config


def build_chain_from_config(
    config: GatewayConfig,
    factory: Optional[InterceptorFactory] = None
) -> InterceptorChain:
    """
    Create every configured interceptor and build a frozen chain

    Args:
        config: Gateway configuration
        factory: Factory to use, for custom interceptor types

    Returns:
        Frozen InterceptorChain
    """
    factory = factory or InterceptorFactory()
    interceptors = factory.create_all(config.interceptors)
    chain = build_chain(interceptors, allow_duplicates=config.allow_duplicates)
    logger.info(
        f"Built interceptor chain for profile '{config.profile}' "
        f"with {len(chain)} interceptors"
    )
    return chain
