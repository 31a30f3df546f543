"""
HTTP client for the Bhavan Booking REST API.

Every call goes through ApiClient.request, which attaches the bearer token,
logs the exchange and turns every failure into one ApiError subclass whose
message can be shown to the guest as-is.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import requests

from bhavan_booking import settings
from bhavan_booking.exceptions import (
    ApiError,
    AuthorizationError,
    NetworkError,
    RequestTimeoutError,
    ServerError,
)

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = {"password", "confirmPassword", "razorpay_signature"}


def _redact(data: Any) -> Any:
    if isinstance(data, dict):
        return {
            k: ("***" if k in SENSITIVE_FIELDS else _redact(v)) for k, v in data.items()
        }
    return data


def _error_payload(response: requests.Response) -> dict:
    try:
        details = response.json()
    except ValueError:
        return {}
    return details if isinstance(details, dict) else {"details": details}


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.API_TIMEOUT
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Content-Type": "application/json", "Accept": "application/json"}
        )

    def _auth_headers(self, headers: dict) -> dict:
        if headers.get("Authorization") or self.token_provider is None:
            return headers
        try:
            token = self.token_provider()
        except Exception as e:
            # the request still goes out; the server decides whether it needs auth
            logger.error(f"Error getting token for request: {e}")
            return headers
        if token:
            headers["Authorization"] = f"Bearer {token}"
            logger.debug("Token added to request")
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
        fallback_message: str = "Request failed",
        status_messages: Optional[dict[int, str]] = None,
    ) -> Any:
        """
        Perform a call and return the decoded JSON body.

        Raises:
            RequestTimeoutError: no answer within the configured timeout
            NetworkError: connection refused, DNS failure, no response
            AuthorizationError: HTTP 401
            ServerError: any other error status; the message is the server's
                ``message``, else ``status_messages[status]``, else
                ``fallback_message``
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        request_headers = self._auth_headers(dict(headers or {}))
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        logger.info("API Request: %s %s", method.upper(), url)
        if json is not None:
            logger.debug("Data: %s", _redact(json))

        try:
            response = self.session.request(
                method.upper(),
                url,
                json=json,
                params=params or None,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.error("API Error: Network Error (timeout) %s %s: %s", method.upper(), url, e)
            raise RequestTimeoutError() from e
        except requests.exceptions.RequestException as e:
            logger.error("API Error: Network Error %s %s: %s", method.upper(), url, e)
            raise NetworkError() from e

        if not response.ok:
            payload = _error_payload(response)
            server_message = payload.get("message")
            message = (
                server_message
                if isinstance(server_message, str) and server_message.strip()
                else (status_messages or {}).get(response.status_code, fallback_message)
            )
            logger.error("API Error: %s %s", response.status_code, url)
            logger.error("Error details: %s", payload or response.text[:500])
            error_cls = AuthorizationError if response.status_code == 401 else ServerError
            raise error_cls(message, status_code=response.status_code, payload=payload)

        logger.info("API Response: %s %s", response.status_code, url)
        try:
            return response.json()
        except ValueError as e:
            logger.error("API Error: invalid JSON from %s", url)
            raise ServerError(fallback_message, status_code=response.status_code) from e

    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request("PUT", path, **kwargs)

    def close(self) -> None:
        self.session.close()


__all__ = ["ApiClient", "ApiError"]
