import logging

import pytest
import structlog

from conftest import make_response

from bhavan_booking.app import BookingApp
from bhavan_booking.bookings.flow import BookingFlow
from bhavan_booking.core.storage import MemoryBackend, SessionStore


@pytest.fixture
def app(http, monkeypatch):
    monkeypatch.setattr("bhavan_booking.api.client.requests.Session", lambda: http)
    return BookingApp(store=SessionStore(backend=MemoryBackend(), encryption_key=""), base_url="http://api.test/api")


def test_first_launch(app, http):
    assert app.is_first_time_user()
    assert app.startup() is False
    assert not http.request.called

    app.mark_welcome_seen()
    assert not app.is_first_time_user()


def test_login_then_authenticated_requests(app, http):
    http.request.side_effect = [
        make_response(200, {"token": "jwt-1", "user": {"fullName": "Ravi Kumar"}}),
        make_response(200, {"data": []}),
    ]

    app.login("9876543210", "secret1")
    app.packages.fetch_packages()

    assert app.is_authenticated
    assert http.request.call_args.kwargs["headers"]["Authorization"] == "Bearer jwt-1"


def test_startup_with_valid_token(app, http):
    app.store.save_token("jwt-1")
    http.request.return_value = make_response(200, {"user": {"fullName": "Ravi Kumar"}})

    assert app.startup() is True
    assert app.session.user.full_name == "Ravi Kumar"


def test_logout(app):
    app.store.save_token("jwt-1")
    app.startup()

    app.logout()

    assert not app.is_authenticated
    assert app.store.get_token() is None


def test_new_booking_flow_is_independent(app):
    first = app.new_booking_flow()
    second = app.new_booking_flow()

    assert isinstance(first, BookingFlow)
    assert first is not second
    assert first.bookings is app.bookings


def test_app_applies_json_logging(app):
    logger = logging.getLogger("bhavan_booking")

    assert any(
        isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)
        for handler in logger.handlers
    )
    assert logger.propagate is False


def test_logging_setup_can_be_skipped(http, monkeypatch):
    calls = []
    monkeypatch.setattr("bhavan_booking.settings.configure_logging", lambda: calls.append(1))
    monkeypatch.setattr("bhavan_booking.api.client.requests.Session", lambda: http)

    BookingApp(store=SessionStore(backend=MemoryBackend(), encryption_key=""), setup_logging=False)
    assert calls == []

    BookingApp(store=SessionStore(backend=MemoryBackend(), encryption_key=""))
    assert calls == [1]
