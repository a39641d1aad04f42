"""Backend error classification and user-facing messages."""

import json
from typing import Any

import httpx

GENERIC_NETWORK_MESSAGE = (
    "No internet connection or network error. Please check your network settings and try again."
)
TIMEOUT_MESSAGE = "Connection timeout. Please check your internet connection and try again."
REFUSED_MESSAGE = "Unable to connect to the server. Please check your internet connection and try again."
DNS_MESSAGE = "Unable to reach the server. Please check your internet connection and try again."

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "name resolution",
    "enotfound",
)


def is_network_error(exc: BaseException | None) -> bool:
    """Check if an exception means no response reached us from the backend."""
    if exc is None:
        return False
    return isinstance(exc, httpx.TransportError)


def network_error_message(exc: BaseException | None) -> str:
    """Get a user-facing message for a network error, or "" if it is not one."""
    if not is_network_error(exc):
        return ""

    if isinstance(exc, httpx.TimeoutException):
        return TIMEOUT_MESSAGE

    if isinstance(exc, httpx.ConnectError):
        text = str(exc).lower()
        if any(marker in text for marker in _DNS_MARKERS):
            return DNS_MESSAGE
        return REFUSED_MESSAGE

    return GENERIC_NETWORK_MESSAGE


def extract_error_message(payload: Any, default: str) -> str:
    """Pull the most meaningful error message out of a backend response body.

    Checks, in order: ``message``, a plain string body, ``error`` (string or
    object with ``message``) and ``errors`` (list or mapping).
    """
    if not payload:
        return default

    if isinstance(payload, str):
        return payload

    if not isinstance(payload, dict):
        return default

    if payload.get("message"):
        return str(payload["message"])

    error = payload.get("error")
    if error:
        if isinstance(error, str):
            return error
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return json.dumps(error)

    errors = payload.get("errors")
    if errors:
        if isinstance(errors, list):
            return ", ".join(str(item) for item in errors)
        return json.dumps(errors)

    return default
