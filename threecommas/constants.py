"""Canonical 3Commas endpoint constants used by the client package."""

from __future__ import annotations

from enum import Enum


# REST origin. Signatures are computed over the path below this origin, so
# the origin itself never takes part in signing.
THREECOMMAS_BASE = "https://api.3commas.io"

API_V1_PREFIX = "/public/api/ver1"
API_V2_PREFIX = "/public/api/ver2"

API_PREFIXES = {
    1: API_V1_PREFIX,
    2: API_V2_PREFIX,
}

THREECOMMAS_WS = "wss://ws.3commas.io/websocket"

HEADER_API_KEY = "APIKEY"
HEADER_SIGNATURE = "signature"
HEADER_FORCED_MODE = "Forced-Mode"

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH"})

DEFAULT_TIMEOUT_MS = 30_000

# Close code sent by the transport when a connection drops without a close frame.
ABNORMAL_CLOSURE = 1006


class Channel(str, Enum):
    """Streaming channels exposed by the 3Commas WebSocket."""

    SMART_TRADES = "SmartTradesChannel"
    DEALS = "DealsChannel"


CHANNEL_PATHS = {
    Channel.SMART_TRADES: "/smart_trades",
    Channel.DEALS: "/deals",
}


__all__ = [
    "ABNORMAL_CLOSURE",
    "API_PREFIXES",
    "API_V1_PREFIX",
    "API_V2_PREFIX",
    "CHANNEL_PATHS",
    "Channel",
    "DEFAULT_TIMEOUT_MS",
    "HEADER_API_KEY",
    "HEADER_FORCED_MODE",
    "HEADER_SIGNATURE",
    "HTTP_METHODS",
    "THREECOMMAS_BASE",
    "THREECOMMAS_WS",
]
