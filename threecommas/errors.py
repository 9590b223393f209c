"""Exceptions raised by the 3Commas client and helpers to format them."""

from __future__ import annotations

from typing import Any, Mapping


class ThreeCommasError(RuntimeError):
    """Base exception for every error raised by the client."""


class SigningError(ThreeCommasError):
    """Raised when a secret cannot be used with the configured key type."""


class TransportError(ThreeCommasError):
    """Raised when a request never produced a usable response.

    Covers network failures, timeouts, refused connections and non-2xx
    responses that carry no body. The originating ``httpx`` exception is
    available as ``__cause__``.
    """

    def __init__(self, message: str, *, method: str | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.url = url


class RemoteAPIError(ThreeCommasError):
    """Raised when 3Commas answers with a non-2xx status and an error body."""

    def __init__(
        self,
        message: str,
        *,
        payload: Any | None = None,
        status_code: int | None = None,
        method: str | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.payload = payload
        self.status_code = status_code
        self.method = method
        self.url = url


def _normalise_method(method: str | None) -> str:
    token = (method or "").strip().upper()
    return token or "GET"


def _extract_details(payload: Mapping[str, Any] | str | None) -> tuple[str, str]:
    if isinstance(payload, Mapping):
        code = payload.get("error") or payload.get("code")
        message = payload.get("error_description") or payload.get("message") or payload.get("msg")
        return (
            "" if code in (None, "") else str(code),
            "" if message in (None, "") else str(message),
        )
    if payload in (None, ""):
        return "", ""
    return "", str(payload)


def format_threecommas_error(
    method: str | None,
    url: str | None,
    payload: Mapping[str, Any] | str | None,
    *,
    status_code: int | None = None,
) -> str:
    """Return a human readable error string including method and path details."""

    target = url or "<unknown>"
    code_text, message_text = _extract_details(payload)

    base = f"3Commas request failed: {_normalise_method(method)} {target}"
    if status_code is not None:
        base = f"{base} (HTTP {status_code})"

    details = (code_text + " " + message_text).strip()
    if details:
        base = f"{base} → {details}"
    return base


__all__ = [
    "RemoteAPIError",
    "SigningError",
    "ThreeCommasError",
    "TransportError",
    "format_threecommas_error",
]
