import pytest
import requests

from conftest import make_response

from bhavan_booking.exceptions import (
    ApiError,
    AuthorizationError,
    NetworkError,
    RequestTimeoutError,
    ServerError,
)


def test_request_sends_json_with_timeout(api_client, http):
    http.request.return_value = make_response(200, {"data": []})

    result = api_client.get("/packages", params={"category": "mini_hall", "unused": None})

    assert result == {"data": []}
    args, kwargs = http.request.call_args
    assert args == ("GET", "http://api.test/api/packages")
    assert kwargs["params"] == {"category": "mini_hall"}
    assert kwargs["timeout"] == 10
    assert http.headers["Content-Type"] == "application/json"


def test_bearer_token_attached_when_stored(api_client, http, memory_store):
    memory_store.save_token("jwt-123")

    api_client.get("/bookings/my-bookings")

    headers = http.request.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer jwt-123"


def test_no_authorization_header_without_token(api_client, http):
    api_client.get("/packages")

    assert "Authorization" not in http.request.call_args.kwargs["headers"]


def test_explicit_authorization_header_wins(api_client, http, memory_store):
    memory_store.save_token("stored")

    api_client.get("/auth/me", headers={"Authorization": "Bearer explicit"})

    assert http.request.call_args.kwargs["headers"]["Authorization"] == "Bearer explicit"


def test_token_provider_failure_does_not_block_request(http):
    from bhavan_booking.api.client import ApiClient

    def broken():
        raise RuntimeError("keychain locked")

    client = ApiClient(base_url="http://api.test/api", token_provider=broken, session=http)
    client.get("/packages")

    assert http.request.called
    assert "Authorization" not in http.request.call_args.kwargs["headers"]


def test_timeout_is_normalized(api_client, http):
    http.request.side_effect = requests.exceptions.Timeout("read timed out")

    with pytest.raises(RequestTimeoutError) as exc:
        api_client.get("/packages")

    assert exc.value.message == "Request timeout. Please try again."
    assert exc.value.recoverable


def test_connection_error_is_normalized(api_client, http):
    http.request.side_effect = requests.exceptions.ConnectionError("refused")

    with pytest.raises(NetworkError) as exc:
        api_client.get("/packages")

    assert exc.value.message == "Cannot connect to server. Please check your internet connection."
    assert not isinstance(exc.value, RequestTimeoutError)


def test_server_message_is_shown_verbatim(api_client, http):
    http.request.return_value = make_response(400, {"success": False, "message": "Invalid dates"})

    with pytest.raises(ServerError) as exc:
        api_client.post("/bookings/check-availability", json={}, fallback_message="Failed")

    assert exc.value.message == "Invalid dates"
    assert exc.value.status_code == 400
    assert not exc.value.recoverable


def test_status_message_used_when_server_is_silent(api_client, http):
    http.request.return_value = make_response(404, {})

    with pytest.raises(ServerError) as exc:
        api_client.get(
            "/bookings/x",
            fallback_message="Failed to fetch booking details",
            status_messages={404: "Booking not found"},
        )

    assert exc.value.message == "Booking not found"


def test_fallback_message_for_non_json_error(api_client, http):
    http.request.return_value = make_response(500, text="<html>Bad gateway</html>")

    with pytest.raises(ServerError) as exc:
        api_client.get("/bookings/my-bookings", fallback_message="Failed to fetch bookings")

    assert exc.value.message == "Failed to fetch bookings"
    assert exc.value.payload == {}


def test_401_raises_authorization_error(api_client, http):
    http.request.return_value = make_response(401, {"message": "Token expired"})

    with pytest.raises(AuthorizationError) as exc:
        api_client.get("/auth/me")

    assert exc.value.message == "Token expired"
    assert isinstance(exc.value, ApiError)


def test_invalid_json_success_body(api_client, http):
    http.request.return_value = make_response(200, text="not json")

    with pytest.raises(ServerError) as exc:
        api_client.get("/packages", fallback_message="Failed to fetch packages")

    assert exc.value.message == "Failed to fetch packages"


def test_password_not_logged(api_client, http, caplog):
    caplog.set_level("DEBUG", logger="bhavan_booking.api.client")

    api_client.post("/auth/login", json={"phoneNumber": "9876543210", "password": "s3cret!"})

    assert "s3cret!" not in caplog.text
    assert "API Request: POST http://api.test/api/auth/login" in caplog.text
