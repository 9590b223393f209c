"""Asynchronous client for the 3Commas REST API and WebSocket stream."""
from .auth import ApiKeyType, build_signature
from .client import ThreeCommasAPI
from .config import APIOptions, Settings, get_settings
from .constants import Channel
from .errors import RemoteAPIError, SigningError, ThreeCommasError, TransportError
from .rest import ThreeCommasRESTClient, canonical_payload, encode_query, serialize_body
from .websocket import StreamState, ThreeCommasStream

__all__ = [
    "APIOptions",
    "ApiKeyType",
    "Channel",
    "RemoteAPIError",
    "Settings",
    "SigningError",
    "StreamState",
    "ThreeCommasAPI",
    "ThreeCommasError",
    "ThreeCommasRESTClient",
    "ThreeCommasStream",
    "TransportError",
    "build_signature",
    "canonical_payload",
    "encode_query",
    "get_settings",
    "serialize_body",
]
