"""3Commas WebSocket subscriptions."""
from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

import websockets

from .auth import build_signature
from .config import APIOptions
from .constants import ABNORMAL_CLOSURE, Channel

LOGGER = logging.getLogger(__name__)

StreamMessage = Union[str, bytes]
StreamHandler = Callable[[StreamMessage], Optional[Awaitable[None]]]
StreamErrorHandler = Callable[[BaseException], Optional[Awaitable[None]]]
Connector = Callable[[str], Awaitable[Any]]


class StreamState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    SUBSCRIBED = "subscribed"


@dataclass(frozen=True)
class _Subscription:
    channel: str
    command: str
    handler: StreamHandler | None


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class ThreeCommasStream:
    """Manage the single 3Commas WebSocket connection and its subscriptions.

    The connection is opened lazily by the first :meth:`subscribe` call and
    every later subscription is sent over it. Frames are handed to every
    registered handler untouched. A connection that drops with close code 1006
    is reopened and all subscribe commands are sent again; any other closure
    ends the session until the next :meth:`subscribe`.

    Only one reconnect attempt is made per closure. When it fails the
    registrations are dropped and the failure is logged at ERROR before it
    reaches ``error_handler``. The session then stays closed until the next
    :meth:`subscribe`.
    """

    def __init__(
        self,
        options: APIOptions | None = None,
        *,
        connect: Connector | None = None,
        error_handler: StreamErrorHandler | None = None,
    ) -> None:
        self._options = options or APIOptions()
        self._connect = connect or websockets.connect
        self._error_handler = error_handler
        self._lock = asyncio.Lock()
        self._task: asyncio.Task | None = None
        self._connection: Any | None = None
        self._subscriptions: list[_Subscription] = []
        self._state = StreamState.DISCONNECTED

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def url(self) -> str:
        return self._options.ws_url

    def build_identifier(self, channel: Channel | str, path: str) -> str:
        """Return the channel identifier, signed over the channel's ``path``."""

        signature = ""
        if self._options.secrets:
            signature = build_signature(self._options.api_key_type, path, self._options.secrets)
        identifier = {
            "channel": channel.value if isinstance(channel, Channel) else channel,
            "users": [{"api_key": self._options.key, "signature": signature}],
        }
        return json.dumps(identifier, separators=(",", ":"))

    def build_subscribe_command(self, channel: Channel | str, path: str) -> str:
        return json.dumps(
            {"identifier": self.build_identifier(channel, path), "command": "subscribe"},
            separators=(",", ":"),
        )

    async def subscribe(self, channel: Channel | str, path: str, handler: StreamHandler | None = None) -> None:
        """Register ``handler`` for ``channel`` and send the subscribe command.

        Returns without waiting for the connection: opening it and sending the
        command happen in the background.
        """

        name = channel.value if isinstance(channel, Channel) else channel
        subscription = _Subscription(name, self.build_subscribe_command(channel, path), handler)

        async with self._lock:
            self._subscriptions.append(subscription)
            if self._task is None:
                self._state = StreamState.CONNECTING
                self._task = asyncio.create_task(self._run(), name="threecommas-stream")
            elif self._connection is not None:
                await self._send(self._connection, subscription)

    async def unsubscribe(self) -> None:
        """Close the connection, ending every subscription at once."""

        async with self._lock:
            task = self._task
            self._task = None
            self._connection = None
            self._subscriptions = []
            self._state = StreamState.DISCONNECTED

        if task is None:
            return
        LOGGER.info("Closing 3Commas stream")
        task.cancel()
        if task is not asyncio.current_task():
            await asyncio.gather(task, return_exceptions=True)

    async def _send(self, connection: Any, subscription: _Subscription) -> None:
        try:
            await connection.send(subscription.command)
        except websockets.ConnectionClosed:
            # The reader notices the closure and resubscribes on 1006.
            LOGGER.warning("Connection closed before %s subscription was sent", subscription.channel)
            return
        LOGGER.info("Subscribed to %s", subscription.channel)

    def _detach(self) -> None:
        self._task = None
        self._connection = None
        self._subscriptions = []
        self._state = StreamState.DISCONNECTED

    async def _run(self) -> None:
        try:
            reconnecting = False
            while await self._serve_connection(reconnecting):
                LOGGER.warning("3Commas stream closed abnormally; reconnecting")
                reconnecting = True
        finally:
            if self._task is asyncio.current_task():
                self._detach()

    async def _serve_connection(self, reconnecting: bool = False) -> bool:
        """Serve one connection and return whether the session should reconnect.

        The decision is taken under the lock before the connection is closed, so
        a concurrent :meth:`subscribe` either lands on the reconnect or starts a
        fresh session.
        """

        LOGGER.info("Connecting to %s", self.url)
        try:
            connection = await self._connect(self.url)
        except (OSError, asyncio.TimeoutError, websockets.WebSocketException) as exc:
            LOGGER.warning("Unable to connect to %s: %s", self.url, exc, exc_info=exc)
            async with self._lock:
                if self._task is asyncio.current_task():
                    dropped = [subscription.channel for subscription in self._subscriptions]
                    if reconnecting and dropped:
                        LOGGER.error(
                            "Reconnect to %s failed; dropping subscriptions %s",
                            self.url,
                            ", ".join(dropped),
                        )
                    self._detach()
            await self._report_error(exc)
            return False

        reconnect = False
        try:
            async with self._lock:
                for subscription in self._subscriptions:
                    await self._send(connection, subscription)
                self._connection = connection
                self._state = StreamState.SUBSCRIBED

            async for message in connection:
                await self._dispatch(message)
        except websockets.ConnectionClosed:
            pass
        finally:
            async with self._lock:
                if self._connection is connection:
                    self._connection = None
                if self._task is asyncio.current_task():
                    reconnect = connection.close_code == ABNORMAL_CLOSURE
                    if reconnect:
                        self._state = StreamState.CONNECTING
                    else:
                        LOGGER.info("3Commas stream closed (code %s)", connection.close_code)
                        self._detach()
            await connection.close()
        return reconnect

    async def _dispatch(self, message: StreamMessage) -> None:
        for subscription in list(self._subscriptions):
            if subscription.handler is None:
                continue
            try:
                await _maybe_await(subscription.handler(message))
            except Exception:
                LOGGER.exception("Stream handler for %s failed", subscription.channel)

    async def _report_error(self, exc: BaseException) -> None:
        if self._error_handler is None:
            return
        try:
            await _maybe_await(self._error_handler(exc))
        except Exception:
            LOGGER.exception("Stream error handler failed")


__all__ = [
    "StreamErrorHandler",
    "StreamHandler",
    "StreamMessage",
    "StreamState",
    "ThreeCommasStream",
]
