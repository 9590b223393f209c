"""Pytest configuration for the threecommas test suite."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from threecommas.config import get_settings

_HMAC_SECRET = (
    "1c95cd7d4aebe36f28d53610e106e80b85acbb0210f5810832d35e9feae56a8812eafe8271ac314e"
    "839c29cd2fd03df9385f8c39ffa4f5f645df3d371c46153b7f7b5011a2c350471b63f8dac1c103cb"
    "2dee712837fba942bfe03b49405344216a07f8f3"
)


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in list(os.environ):
        if name.startswith("THREECOMMAS_"):
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_private_pem(rsa_private_key: rsa.RSAPrivateKey) -> str:
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def hmac_secret() -> str:
    """Secret published with the 3Commas HMAC signing example."""

    return _HMAC_SECRET
