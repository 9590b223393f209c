"""Async REST client that signs 3Commas requests."""
from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from .auth import build_signature
from .config import APIOptions
from .constants import (
    API_PREFIXES,
    HEADER_API_KEY,
    HEADER_FORCED_MODE,
    HEADER_SIGNATURE,
    HTTP_METHODS,
)
from .errors import RemoteAPIError, TransportError, format_threecommas_error

LOGGER = logging.getLogger(__name__)


def as_payload(payload: Any) -> Any:
    """Return ``payload`` as plain JSON-compatible data.

    Pydantic models are dumped by alias with unset optional fields dropped;
    anything else is returned untouched.
    """

    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True, exclude_none=True)
    return payload


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        value = value.value
    return str(value)


def _flatten(key: str, value: Any) -> list[tuple[str, str]]:
    if value is None:
        return []
    if isinstance(value, Mapping):
        pairs: list[tuple[str, str]] = []
        for child_key, child in value.items():
            pairs.extend(_flatten(f"{key}[{child_key}]", child))
        return pairs
    if isinstance(value, (list, tuple)):
        pairs = []
        for index, child in enumerate(value):
            pairs.extend(_flatten(f"{key}[{index}]", child))
        return pairs
    return [(key, _stringify(value))]


def encode_query(params: Mapping[str, Any] | BaseModel | None) -> str:
    """Serialize ``params`` into the query string that is sent and signed.

    Keys keep their insertion order and ``None`` values are skipped. Nested
    mappings use bracket notation (``a[b]=c``) and sequences use indices
    (``ids[0]=1``). Keys and values are percent-encoded per RFC 3986.

    Raises :class:`TypeError` when ``params`` is neither a mapping nor a
    pydantic model.
    """

    data = as_payload(params)
    if data is None:
        return ""
    if not isinstance(data, Mapping):
        raise TypeError(
            f"Query parameters must be a mapping or a pydantic model, got {type(data).__name__}"
        )
    if not data:
        return ""

    pairs: list[tuple[str, str]] = []
    for key, value in data.items():
        pairs.extend(_flatten(str(key), value))
    return "&".join(f"{quote(key, safe='')}={quote(value, safe='')}" for key, value in pairs)


def serialize_body(payload: Any) -> str:
    """Return the compact JSON body for ``payload`` (empty string for ``None``)."""

    data = as_payload(payload)
    if data is None:
        return ""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def canonical_payload(method: str, payload: Any) -> str:
    """Return the string a request with ``method`` and ``payload`` is signed over."""

    if method.upper() == "GET":
        return encode_query(payload)
    return serialize_body(payload)


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ThreeCommasRESTClient:
    """Small httpx-based REST client that signs 3Commas requests."""

    def __init__(self, options: APIOptions | None = None, *, client: httpx.AsyncClient | None = None) -> None:
        self._options = options or APIOptions()
        self._base_url = self._options.base_url.rstrip("/")
        self._timeout = httpx.Timeout(self._options.timeout_seconds)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)

    @property
    def options(self) -> APIOptions:
        return self._options

    async def __aenter__(self) -> "ThreeCommasRESTClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    def build_url(self, version: int, path: str) -> str:
        try:
            prefix = API_PREFIXES[version]
        except KeyError:
            raise ValueError(f"Unsupported API version {version!r}") from None
        return f"{self._base_url}{prefix}{path}"

    def relative_path(self, url: str) -> str:
        if url.startswith(self._base_url):
            return url[len(self._base_url):]
        return url

    def sign(self, relative_path: str, payload: str) -> str:
        """Return the signature header value, empty when no secret is configured."""

        if not self._options.secrets:
            return ""
        return build_signature(
            self._options.api_key_type,
            f"{relative_path}?{payload}",
            self._options.secrets,
        )

    def _headers(self, signature: str) -> dict[str, str]:
        headers = {
            HEADER_API_KEY: self._options.key,
            HEADER_SIGNATURE: signature,
        }
        if self._options.forced_mode:
            headers[HEADER_FORCED_MODE] = self._options.forced_mode
        return headers

    async def request(self, method: str, version: int, path: str, payload: Any = None) -> Any:
        """Send a signed request and return the decoded response body.

        Raises :class:`RemoteAPIError` when 3Commas answers with an error body
        and :class:`TransportError` when no usable response arrived.
        """

        method_token = method.upper()
        if method_token not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method {method!r}")

        url = self.build_url(version, path)
        canonical = canonical_payload(method_token, payload)
        headers = self._headers(self.sign(self.relative_path(url), canonical))

        request_kwargs: dict[str, Any] = {}
        target = url
        if method_token == "GET":
            if canonical:
                target = f"{url}?{canonical}"
        elif canonical:
            headers["Content-Type"] = "application/json"
            request_kwargs["content"] = canonical.encode("utf-8")

        LOGGER.info("→ %s %s", method_token, target)
        if method_token != "GET" and canonical:
            LOGGER.debug("→ BODY: %s", canonical)

        try:
            response = await self._client.request(
                method_token,
                target,
                headers=headers,
                timeout=self._timeout,
                **request_kwargs,
            )
        except httpx.HTTPError as exc:
            LOGGER.warning("3Commas request %s %s failed: %s", method_token, url, exc)
            raise TransportError(
                f"HTTP request to 3Commas failed: {exc}", method=method_token, url=url
            ) from exc

        LOGGER.info("3Commas response %s %s status=%s", method_token, url, response.status_code)

        if response.is_success:
            return _decode(response)

        error_body = _decode(response)
        if error_body in (None, ""):
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise TransportError(
                    format_threecommas_error(method_token, url, None, status_code=response.status_code),
                    method=method_token,
                    url=url,
                ) from exc

        reason = error_body
        if self._options.error_handler is not None:
            reason = await self._run_error_handler(error_body)
        if isinstance(reason, BaseException):
            raise reason

        raise RemoteAPIError(
            format_threecommas_error(method_token, url, reason, status_code=response.status_code),
            payload=reason,
            status_code=response.status_code,
            method=method_token,
            url=url,
        )

    async def _run_error_handler(self, error_body: Any) -> Any:
        """Invoke the error hook and return the reason the call fails with.

        The hook receives a ``reject`` callback; the first reason passed to it
        replaces the error body. The call fails either way.
        """

        rejections: list[Any] = []

        def reject(reason: Any = None) -> None:
            if not rejections:
                rejections.append(error_body if reason is None else reason)

        result = self._options.error_handler(error_body, reject)
        if inspect.isawaitable(result):
            await result
        return rejections[0] if rejections else error_body


__all__ = [
    "ThreeCommasRESTClient",
    "as_payload",
    "canonical_payload",
    "encode_query",
    "serialize_body",
]
