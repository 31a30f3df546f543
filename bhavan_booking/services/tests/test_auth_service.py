import pytest
import requests

from conftest import make_response

from bhavan_booking.exceptions import ApiError, AuthorizationError, ValidationError
from bhavan_booking.services.auth import AuthService

USER = {"_id": "u1", "fullName": "Ravi Kumar", "phoneNumber": "+919876543210", "email": "ravi@example.com"}


@pytest.fixture
def auth(api_client, memory_store):
    return AuthService(api_client, memory_store)


def test_login_persists_session(auth, http, memory_store):
    http.request.return_value = make_response(200, {"success": True, "token": "jwt-1", "user": USER})

    session = auth.login("9876543210", "secret1")

    assert session.token == "jwt-1"
    assert memory_store.get_token() == "jwt-1"
    assert memory_store.get_user().full_name == "Ravi Kumar"
    assert http.request.call_args.kwargs["json"] == {"phoneNumber": "9876543210", "password": "secret1"}


def test_login_then_startup_keeps_session(auth, http, memory_store):
    http.request.side_effect = [
        make_response(200, {"token": "jwt-1", "user": USER}),
        make_response(200, {"success": True, "user": USER}),
    ]

    auth.login("9876543210", "secret1")
    restored = auth.restore_session()

    assert restored is not None
    assert restored.token == "jwt-1"
    assert memory_store.get_token() == "jwt-1"
    me_call = http.request.call_args_list[1]
    assert me_call.args == ("GET", "http://api.test/api/auth/me")
    assert me_call.kwargs["headers"]["Authorization"] == "Bearer jwt-1"


def test_invalid_login_never_reaches_server(auth, http):
    with pytest.raises(ValidationError):
        auth.login("98765", "secret1")
    assert not http.request.called


def test_login_failure_message_from_server(auth, http, memory_store):
    http.request.return_value = make_response(401, {"message": "Invalid credentials"})

    with pytest.raises(AuthorizationError) as exc:
        auth.login("9876543210", "wrongpass")

    assert exc.value.message == "Invalid credentials"
    assert memory_store.get_token() is None


def test_login_without_token_in_response(auth, http):
    http.request.return_value = make_response(200, {"success": False})

    with pytest.raises(ApiError) as exc:
        auth.login("9876543210", "secret1")
    assert exc.value.message == "Login failed"


def test_register_omits_empty_email(auth, http):
    http.request.return_value = make_response(201, {"token": "jwt-2", "user": USER})

    auth.register("Ravi Kumar", "9876543210", "password1", email="  ")

    payload = http.request.call_args.kwargs["json"]
    assert "email" not in payload
    assert payload["fullName"] == "Ravi Kumar"


def test_restore_session_without_token(auth, http):
    assert auth.restore_session() is None
    assert not http.request.called


@pytest.mark.parametrize(
    "failure",
    [
        make_response(401, {"message": "Invalid token"}),
        make_response(500, {}),
        requests.exceptions.ConnectionError("offline"),
    ],
)
def test_restore_session_drops_token_on_any_failure(auth, http, memory_store, failure):
    memory_store.save_token("stale")
    http.request.side_effect = [failure]

    assert auth.restore_session() is None
    assert memory_store.get_token() is None
    assert memory_store.get_user() is None


def test_update_profile_refreshes_cached_user(auth, http, memory_store):
    memory_store.save_token("jwt")
    http.request.return_value = make_response(200, {"user": dict(USER, fullName="Ravi K")})

    user = auth.update_profile(fullName="Ravi K")

    assert user.full_name == "Ravi K"
    assert memory_store.get_user().full_name == "Ravi K"
    assert http.request.call_args.args[0] == "PUT"


def test_logout_clears_store(auth, memory_store):
    memory_store.save_token("jwt")
    auth.logout()
    assert memory_store.get_session() is None
