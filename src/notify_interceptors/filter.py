"""
Filter interceptor with boolean logic for notification filtering
"""

import fnmatch
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .base import NotificationInterceptor
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_MISSING = object()


class FilterType(Enum):
    """Filter types for boolean logic"""
    AND = "and"
    OR = "or"
    NOT = "not"
    IDENTIFIER = "identifier"  # fnmatch pattern on request.identifier
    HAS_HEADER = "has_header"
    HEADER_EQUALS = "header_equals"
    CONTENT_TYPE = "content_type"
    PAYLOAD_EQUALS = "payload_equals"  # dotted path into a dict payload
    STREAM = "stream"  # message.stream_id
    ALWAYS = "always"
    NEVER = "never"


_STRING_VALUE_TYPES = {FilterType.IDENTIFIER, FilterType.HAS_HEADER, FilterType.CONTENT_TYPE}
_MAPPING_VALUE_TYPES = {FilterType.HEADER_EQUALS: 'header', FilterType.PAYLOAD_EQUALS: 'path'}


def _header(request: Any, name: str) -> Optional[str]:
    headers = getattr(request, 'headers', None) or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def _payload_field(request: Any, path: str) -> Any:
    current = getattr(request, 'payload', None)
    for segment in path.split('.'):
        if not isinstance(current, dict) or segment not in current:
            return _MISSING
        current = current[segment]
    return current


def _media_type(request: Any) -> str:
    content_type = getattr(request, 'content_type', '') or ''
    return content_type.split(';')[0].strip().lower()


@dataclass
class FilterCondition:
    """Single filter condition"""
    type: FilterType
    value: Optional[Any] = None
    conditions: Optional[List['FilterCondition']] = None

    def evaluate(self, request: Any, message: Any) -> bool:
        """
        Evaluate filter condition

        Args:
            request: Notification request
            message: Notification message

        Returns:
            True if condition matches
        """
        if self.type == FilterType.AND:
            return all(c.evaluate(request, message) for c in (self.conditions or []))

        elif self.type == FilterType.OR:
            return any(c.evaluate(request, message) for c in (self.conditions or []))

        elif self.type == FilterType.NOT:
            return not self.conditions[0].evaluate(request, message) if self.conditions else False

        elif self.type == FilterType.IDENTIFIER:
            identifier = getattr(request, 'identifier', None)
            return identifier is not None and fnmatch.fnmatchcase(identifier, self.value)

        elif self.type == FilterType.HAS_HEADER:
            return _header(request, self.value) is not None

        elif self.type == FilterType.HEADER_EQUALS:
            if isinstance(self.value, dict):
                return _header(request, self.value.get('header', '')) == self.value.get('value')
            return False

        elif self.type == FilterType.CONTENT_TYPE:
            return _media_type(request) == str(self.value).lower()

        elif self.type == FilterType.PAYLOAD_EQUALS:
            if isinstance(self.value, dict):
                found = _payload_field(request, self.value.get('path', ''))
                return found is not _MISSING and found == self.value.get('value')
            return False

        elif self.type == FilterType.STREAM:
            return getattr(message, 'stream_id', None) == self.value

        elif self.type == FilterType.ALWAYS:
            return True

        elif self.type == FilterType.NEVER:
            return False

        return False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FilterCondition':
        """
        Create filter condition from dictionary

        Args:
            data: Filter configuration

        Returns:
            FilterCondition instance

        Raises:
            ConfigurationError: on an unknown filter type or a missing or
                malformed value
        """
        if not isinstance(data, dict):
            raise ConfigurationError(f"Filter condition must be a mapping, got {data!r}")

        try:
            filter_type = FilterType(data.get('type', 'always'))
        except ValueError as e:
            raise ConfigurationError(f"Unknown filter type: {data.get('type')}") from e

        # Handle nested conditions
        conditions = None
        if 'conditions' in data:
            if not isinstance(data['conditions'], list):
                raise ConfigurationError(f"'{filter_type.value}' conditions must be a list")
            conditions = [cls.from_dict(c) for c in data['conditions']]
        elif 'condition' in data:
            conditions = [cls.from_dict(data['condition'])]

        value = data.get('value')
        if filter_type in _STRING_VALUE_TYPES and not isinstance(value, str):
            raise ConfigurationError(f"'{filter_type.value}' filter needs a string value")
        if filter_type in _MAPPING_VALUE_TYPES:
            key = _MAPPING_VALUE_TYPES[filter_type]
            if not isinstance(value, dict) or not isinstance(value.get(key), str):
                raise ConfigurationError(
                    f"'{filter_type.value}' filter needs a value mapping with a '{key}' string"
                )
        if filter_type == FilterType.NOT and not conditions:
            raise ConfigurationError("'not' filter needs a condition")

        return cls(
            type=filter_type,
            value=value,
            conditions=conditions
        )


class FilterInterceptor(NotificationInterceptor):
    """
    Accept or discard notifications by identifier, headers, content type
    and payload fields

    Two configuration styles are supported and combined: the shorthand
    keys (``allow_identifiers``, ``deny_identifiers``, ``require_headers``,
    ``content_types``) and a ``filter_logic`` condition tree with
    ``match_action``/``non_match_action``.
    """

    name = "filter"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)

        self.allow_identifiers = list(self.config.get('allow_identifiers', []))
        self.deny_identifiers = list(self.config.get('deny_identifiers', []))
        self.require_headers = dict(self.config.get('require_headers', {}))
        self.content_types = [c.lower() for c in self.config.get('content_types', [])]

        self.filter_logic = self._parse_filter_logic(self.config.get('filter_logic'))
        self.match_action = self._parse_action(self.config.get('match_action', 'accept'))
        self.non_match_action = self._parse_action(self.config.get('non_match_action', 'discard'))

        logger.debug(
            f"Filter {self.name}: allow={self.allow_identifiers} deny={self.deny_identifiers} "
            f"headers={list(self.require_headers)} logic={'yes' if self.filter_logic else 'no'}"
        )

    def _parse_filter_logic(self, logic: Union[Dict, str, None]) -> Optional[FilterCondition]:
        """Parse filter logic configuration"""
        if logic is None:
            return None

        if isinstance(logic, str):
            if logic == "always":
                return FilterCondition(type=FilterType.ALWAYS)
            elif logic == "never":
                return FilterCondition(type=FilterType.NEVER)
            elif logic in FILTER_PRESETS:
                return FilterCondition.from_dict(FILTER_PRESETS[logic])
            # Bare string is an identifier pattern
            return FilterCondition(type=FilterType.IDENTIFIER, value=logic)

        if isinstance(logic, dict):
            return FilterCondition.from_dict(logic)

        raise ConfigurationError(f"Invalid filter_logic: {logic!r}")

    def _parse_action(self, action: str) -> bool:
        """Map an action name to the decision it produces"""
        action_map = {
            'accept': True,
            'allow': True,
            'continue': True,
            'discard': False,
            'drop': False,
            'block': False,
        }
        try:
            return action_map[str(action).lower()]
        except KeyError:
            raise ConfigurationError(f"Unknown filter action: {action}") from None

    def process(self, request: Any, message: Any) -> bool:
        identifier = getattr(request, 'identifier', '') or ''

        if any(fnmatch.fnmatchcase(identifier, p) for p in self.deny_identifiers):
            return False

        if self.allow_identifiers and not any(
            fnmatch.fnmatchcase(identifier, p) for p in self.allow_identifiers
        ):
            return False

        for header, expected in self.require_headers.items():
            actual = _header(request, header)
            if actual is None:
                return False
            if expected is not None and actual != str(expected):
                return False

        if self.content_types and _media_type(request) not in self.content_types:
            return False

        if self.filter_logic is not None:
            matches = self.filter_logic.evaluate(request, message)
            return self.match_action if matches else self.non_match_action

        return True


# Common filter presets
FILTER_PRESETS = {
    'json_only': {
        'type': 'or',
        'conditions': [
            {'type': 'content_type', 'value': 'application/json'},
            {'type': 'content_type', 'value': 'application/vnd.api+json'}
        ]
    },
    'signed': {
        'type': 'has_header',
        'value': 'X-Signature'
    },
}
