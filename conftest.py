import json
import logging
from unittest.mock import MagicMock

import pytest
import requests

from bhavan_booking.api.client import ApiClient
from bhavan_booking.core.storage import MemoryBackend, SessionStore
from bhavan_booking.domain.entities import Package

CONFIGURED_LOGGERS = ["", "bhavan_booking", "bhavan_booking.payments", "urllib3"]


def make_response(status_code=200, body=None, text=None):
    response = requests.Response()
    response.status_code = status_code
    if body is not None:
        response._content = json.dumps(body).encode()
    else:
        response._content = (text or "").encode()
    response.headers["Content-Type"] = "application/json"
    return response


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo configure_logging() so caplog keeps seeing records in later tests."""
    saved = {}
    for name in CONFIGURED_LOGGERS:
        logger = logging.getLogger(name)
        saved[name] = (list(logger.handlers), logger.propagate, logger.level)
    yield
    for name, (handlers, propagate, level) in saved.items():
        logger = logging.getLogger(name)
        logger.handlers[:] = handlers
        logger.propagate = propagate
        logger.setLevel(level)


@pytest.fixture
def memory_store():
    return SessionStore(backend=MemoryBackend(), encryption_key="")


@pytest.fixture
def http():
    """requests.Session double; queue replies with ``http.request.side_effect``."""
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    session.request.return_value = make_response(200, {})
    return session


@pytest.fixture
def api_client(http, memory_store):
    return ApiClient(
        base_url="http://api.test/api",
        timeout=10,
        token_provider=memory_store.get_token,
        session=http,
    )


@pytest.fixture
def package_data():
    return {
        "_id": "pkg-1",
        "name": "Function Hall Package",
        "category": "function_hall_only",
        "shortDescription": "Hall for 300 guests",
        "pricing": {"basePrice": 25000, "gstPercentage": 18},
        "includes": {
            "resources": [
                {
                    "resource": {"_id": "res-1", "name": "Main Hall", "facilityType": "function_hall"},
                    "quantity": 1,
                }
            ]
        },
    }


@pytest.fixture
def rooms_only_package():
    return Package.from_api(
        {
            "_id": "pkg-rooms",
            "name": "Rooms Only Booking",
            "category": "rooms_only",
            "pricing": {"basePrice": 1500, "gstPercentage": 12},
            "includes": {
                "resources": [
                    {
                        "resource": {"_id": "r1", "name": "AC Room", "facilityType": "guest_room"},
                        "quantity": 10,
                        "isFlexible": True,
                    }
                ]
            },
        }
    )


@pytest.fixture
def create_order_response():
    return {
        "success": True,
        "booking": {"bookingId": "bk-1", "bookingReferenceId": "MVB-0001"},
        "razorpay": {
            "orderId": "order_abc",
            "amount": 2950000,
            "currency": "INR",
            "key": "rzp_test_key",
        },
        "dates": {"checkInDate": "10-12-2025", "checkOutDate": "11-12-2025"},
    }
