"""Tests for the notification dispatcher."""

import logging

import pytest

from notify_interceptors import FilterInterceptor, build_chain
from notify_gateway.dispatcher import NotificationDispatcher
from notify_gateway.message import NotificationMessage, NotificationParseError


class TestNotificationDispatcher:
    """Test running notifications through the chain and into the handler."""

    @pytest.fixture
    def handled(self):
        return []

    @pytest.fixture
    def handler(self, handled):
        def _handler(request, message):
            handled.append((request.identifier, message))
        return _handler

    def test_accepted_notification_reaches_handler(self, make_interceptor, handler, handled, request_, message):
        chain = build_chain([make_interceptor("a"), make_interceptor("b")])
        dispatcher = NotificationDispatcher(chain, handler)

        result = dispatcher.dispatch(request_, message)

        assert result.accepted
        assert handled == [("alerts-prod", message)]
        assert dispatcher.stats() == {
            'received': 1, 'accepted': 1, 'discarded': 0, 'handler_errors': 0
        }

    def test_rejected_notification_is_discarded(self, make_interceptor, calls, handler, handled, request_, message, caplog):
        chain = build_chain([
            make_interceptor("A"),
            make_interceptor("B", decision=False),
            make_interceptor("C"),
        ])
        dispatcher = NotificationDispatcher(chain, handler)

        with caplog.at_level(logging.INFO):
            result = dispatcher.dispatch(request_, message)

        assert result.rejected_by == "B"
        assert calls == ["A", "B"]
        assert handled == []
        assert dispatcher.stats()['discarded'] == 1
        assert "rejected by B" in caplog.text

    def test_faulting_interceptor_discards(self, make_interceptor, calls, handler, handled, request_, message):
        chain = build_chain([
            make_interceptor("A"),
            make_interceptor("B", raises=True),
            make_interceptor("C"),
        ])
        dispatcher = NotificationDispatcher(chain, handler)

        result = dispatcher.dispatch(request_, message)

        assert result.rejected
        assert calls == ["A", "B"]
        assert handled == []

    def test_handler_fault_is_contained(self, make_interceptor, request_, caplog):
        def broken_handler(request, message):
            raise RuntimeError("handler bug")

        dispatcher = NotificationDispatcher(build_chain([make_interceptor("a")]), broken_handler)

        with caplog.at_level(logging.ERROR):
            result = dispatcher.dispatch(request_)

        assert result.accepted
        assert dispatcher.stats()['handler_errors'] == 1
        assert "handler bug" in caplog.text

    def test_missing_message_defaults_to_empty(self, make_interceptor, handler, handled, request_):
        dispatcher = NotificationDispatcher(build_chain([make_interceptor("a")]), handler)

        dispatcher.dispatch(request_)

        assert handled[0][1] == NotificationMessage()

    def test_without_handler(self, make_interceptor, request_):
        dispatcher = NotificationDispatcher(build_chain([make_interceptor("a")]))

        assert dispatcher.dispatch(request_).accepted

    def test_dispatch_raw(self, handler, handled):
        chain = build_chain([FilterInterceptor({'allow_identifiers': ['alerts-*']})])
        dispatcher = NotificationDispatcher(chain, handler)

        assert dispatcher.dispatch_raw("alerts-prod", b'{"ok": true}').accepted
        assert not dispatcher.dispatch_raw("marketing", b'{"ok": true}').accepted
        assert [identifier for identifier, _ in handled] == ["alerts-prod"]
        assert dispatcher.stats()['received'] == 2

    def test_dispatch_raw_malformed(self, make_interceptor):
        dispatcher = NotificationDispatcher(build_chain([make_interceptor("a")]))

        with pytest.raises(NotificationParseError):
            dispatcher.dispatch_raw("alerts", b"{not json")

        assert dispatcher.stats()['received'] == 0
