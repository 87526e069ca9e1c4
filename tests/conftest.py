"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add the src directory to Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from notify_interceptors import InterceptorChain, NotificationInterceptor  # noqa: E402
from notify_gateway.message import NotificationMessage, NotificationRequest  # noqa: E402


class RecordingInterceptor(NotificationInterceptor):
    """Interceptor returning a fixed decision and recording every call."""

    def __init__(self, name, decision=True, calls=None, config=None):
        super().__init__(config)
        self.name = name
        self.decision = decision
        self.calls = calls if calls is not None else []
        self.init_count = 0

    def init(self):
        self.init_count += 1

    def process(self, request, message):
        self.calls.append(self.name)
        return self.decision


class RaisingInterceptor(RecordingInterceptor):
    """Interceptor whose decision always faults."""

    def process(self, request, message):
        self.calls.append(self.name)
        raise RuntimeError(f"{self.name} exploded")


@pytest.fixture
def calls():
    """Shared invocation log."""
    return []


@pytest.fixture
def make_interceptor(calls):
    """Build recording interceptors that share one invocation log."""
    def _make(name, decision=True, raises=False, **config):
        cls = RaisingInterceptor if raises else RecordingInterceptor
        return cls(name, decision=decision, calls=calls, config=config or None)
    return _make


@pytest.fixture
def chain():
    """Empty, unfrozen chain."""
    return InterceptorChain()


@pytest.fixture
def request_():
    """A JSON notification request."""
    return NotificationRequest(
        identifier="alerts-prod",
        headers={"Content-Type": "application/json", "X-Signature": "abc123"},
        payload={"alert": {"severity": "high", "title": "Disk full"}},
    )


@pytest.fixture
def message():
    """An outgoing message."""
    return NotificationMessage(stream_id="stream-1", message="Disk full on db-1")
