"""Signing helpers for 3Commas REST requests and stream subscriptions."""
from __future__ import annotations

import base64
import hashlib
import hmac
from enum import Enum

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .errors import SigningError


class ApiKeyType(str, Enum):
    """Origin of an API key, which decides the signing algorithm."""

    SYSTEM_GENERATED = "systemGenerated"
    SELF_GENERATED = "selfGenerated"


def _sign_hex(payload: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def _load_rsa_key(secret: str) -> rsa.RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(secret.encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningError(f"Invalid PEM private key: {exc}") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise SigningError(f"Self-generated keys must be RSA, got {type(key).__name__}")
    return key


def _sign_base64(payload: str, secret: str) -> str:
    key = _load_rsa_key(secret)
    signature = key.sign(payload.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256())
    return base64.b64encode(signature).decode("ascii")


def build_signature(api_key_type: ApiKeyType | str, payload: str, secret: str) -> str:
    """Return the signature of ``payload`` for the given key type.

    System generated keys sign with HMAC-SHA256 and return a hex digest. Self
    generated keys sign with RSA-SHA256 (PKCS#1 v1.5) using the PEM private key
    in ``secret`` and return the signature base64 encoded.

    Raises :class:`SigningError` when ``secret`` does not fit the key type.
    """

    try:
        key_type = ApiKeyType(api_key_type)
    except ValueError as exc:
        raise SigningError(f"Unknown API key type {api_key_type!r}") from exc

    if key_type is ApiKeyType.SELF_GENERATED:
        return _sign_base64(payload, secret)
    return _sign_hex(payload, secret)


__all__ = ["ApiKeyType", "build_signature"]
