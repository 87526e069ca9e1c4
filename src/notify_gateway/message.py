"""
Notification request and message models with JSON parsing
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field

JSON_CONTENT_TYPES = frozenset([
    'application/json',
    'application/vnd.api+json',
    'text/json',
])


class NotificationParseError(ValueError):
    """Notification body could not be decoded"""


class NotificationRequest(BaseModel):
    """Inbound notification from an external source"""
    model_config = ConfigDict(frozen=True)

    identifier: str  # Route or source id the notification was posted to
    headers: Dict[str, str] = Field(default_factory=dict)
    payload: Any = None
    content_type: str = "application/json"
    received_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_json(self) -> bool:
        return self.content_type.split(';')[0].strip().lower() in JSON_CONTENT_TYPES


class NotificationMessage(BaseModel):
    """Message the application posts in reaction to a notification"""
    model_config = ConfigDict(frozen=True)

    stream_id: Optional[str] = None
    message: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    attachments: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.message or self.data or self.attachments)


def parse_notification(
    identifier: str,
    body: Union[bytes, str, None],
    headers: Optional[Mapping[str, str]] = None
) -> NotificationRequest:
    """
    Build a NotificationRequest from a raw body

    Args:
        identifier: Route or source id
        body: Raw request body
        headers: Request headers

    Returns:
        NotificationRequest. JSON bodies are decoded, other bodies are kept
        as text.

    Raises:
        NotificationParseError: if a JSON body is malformed
    """
    headers = dict(headers or {})
    content_type = next(
        (v for k, v in headers.items() if k.lower() == 'content-type'),
        'application/json'
    )

    if isinstance(body, str):
        body = body.encode('utf-8')

    request = NotificationRequest(
        identifier=identifier,
        headers=headers,
        content_type=content_type,
    )

    if not body or not body.strip():
        return request

    if request.is_json:
        try:
            payload = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise NotificationParseError(
                f"Malformed JSON body for notification '{identifier}': {e}"
            ) from e
    else:
        payload = body.decode('utf-8', errors='replace')

    return request.model_copy(update={'payload': payload})


def message_from_dict(data: Optional[Mapping[str, Any]]) -> NotificationMessage:
    """Create a NotificationMessage from a plain mapping"""
    if not data:
        return NotificationMessage()
    return NotificationMessage(
        stream_id=data.get('stream_id') or data.get('streamId'),
        message=data.get('message'),
        data=dict(data.get('data') or {}),
        attachments=list(data.get('attachments') or []),
    )
