"""Transport Channel: the bidirectional link to the remote assistant.

The channel is owned by a single ChatSession and lives exactly as long as
it. Lifecycle transitions are surfaced through the same subscription
mechanism as inbound events, using the Socket.IO names ``connect``,
``disconnect`` and ``connect_error``.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Callable
from typing import Any

import socketio
from socketio.exceptions import ConnectionError as SocketIOConnectionError
from socketio.exceptions import SocketIOError

from src.chat.config import ChatConfig

logger = logging.getLogger(__name__)

CONNECT = "connect"
DISCONNECT = "disconnect"
CONNECT_ERROR = "connect_error"
LIFECYCLE_EVENTS = frozenset({CONNECT, DISCONNECT, CONNECT_ERROR})

Handler = Callable[..., Any]


class TransportError(Exception):
    """Raised when the underlying transport rejects an operation."""

    pass


class TransportChannel(ABC):
    """Base class for channels.

    Subclasses implement the connection itself; handler bookkeeping and the
    "never send while disconnected" rule live here.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self.session_id: str | None = None

    def on_event(self, name: str, handler: Handler) -> None:
        """Subscribe to an inbound or lifecycle event.

        Handlers may be plain callables or coroutine functions. They run in
        registration order.
        """
        self._handlers[name].append(handler)

    async def dispatch(self, name: str, *args: Any) -> None:
        """Deliver an event to its subscribers, awaiting coroutine handlers."""
        for handler in list(self._handlers.get(name, ())):
            result = handler(*args)
            if inspect.isawaitable(result):
                await result

    async def send(self, event: str, payload: Any) -> bool:
        """Fire-and-forget send.

        Returns:
            True if the payload was handed to the transport, False if the
            channel is not connected or the transport refused it.
        """
        if not self.connected:
            logger.warning(f"Dropping '{event}': channel is not connected")
            return False

        try:
            await self._emit(event, payload)
        except TransportError as e:
            logger.warning(f"Failed to send '{event}': {e}")
            return False
        return True

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Whether the channel has completed its handshake and not dropped since."""

    @abstractmethod
    async def open(self, session_id: str) -> None:
        """Start connecting. Failures are reported via ``connect_error``."""

    @abstractmethod
    async def close(self) -> None:
        """Disconnect unconditionally. Safe from any state."""

    @abstractmethod
    async def _emit(self, event: str, payload: Any) -> None:
        """Write one event to the wire. Raise TransportError on refusal."""


class SocketIOChannel(TransportChannel):
    """Channel backed by a python-socketio AsyncClient.

    Automatic reconnection is disabled; the session decides when to reopen.
    """

    def __init__(
        self,
        config: ChatConfig,
        client: socketio.AsyncClient | None = None,
    ) -> None:
        super().__init__()
        self._config = config
        self._client = client or socketio.AsyncClient(reconnection=False)
        self._connected = False
        self._closing = False
        self._error_reported = False
        self._bound: set[str] = set()

        self._client.on(CONNECT, self._on_connect)
        self._client.on(DISCONNECT, self._on_disconnect)
        self._client.on(CONNECT_ERROR, self._on_connect_error)

    @property
    def connected(self) -> bool:
        return self._connected

    def on_event(self, name: str, handler: Handler) -> None:
        super().on_event(name, handler)
        if name in LIFECYCLE_EVENTS or name in self._bound:
            return

        async def forward(*args: Any) -> None:
            if not self._closing:
                await self.dispatch(name, *args)

        self._client.on(name, forward)
        self._bound.add(name)

    async def open(self, session_id: str) -> None:
        self.session_id = session_id
        self._closing = False
        self._error_reported = False
        url = self._config.server_url

        logger.info(f"Connecting to {url} for session {session_id}")
        try:
            await self._client.connect(
                url,
                transports=self._config.transports,
                wait_timeout=self._config.connect_timeout,
            )
        except SocketIOConnectionError as e:
            logger.warning(f"Connection to {url} failed: {e}")
            if not self._error_reported and not self._closing:
                await self._on_connect_error(str(e))
            return

        if self._closing:
            # close() ran while the handshake was in flight
            await self._client.disconnect()

    async def close(self) -> None:
        self._closing = True
        self._connected = False
        await self._client.disconnect()
        logger.info(f"Channel closed for session {self.session_id}")

    async def _emit(self, event: str, payload: Any) -> None:
        try:
            await self._client.emit(event, payload)
        except SocketIOError as e:
            raise TransportError(str(e)) from e

    async def _on_connect(self) -> None:
        if self._closing:
            return
        self._connected = True
        logger.info(f"Connected to {self._config.server_url}")
        await self.dispatch(CONNECT)

    async def _on_disconnect(self, reason: Any = None) -> None:
        was_connected = self._connected
        self._connected = False
        if was_connected:
            logger.info(f"Disconnected from {self._config.server_url} ({reason})")
            await self.dispatch(DISCONNECT)

    async def _on_connect_error(self, data: Any = None) -> None:
        self._connected = False
        if self._closing:
            return
        self._error_reported = True
        logger.error(f"Connection error: {data}")
        await self.dispatch(CONNECT_ERROR, data)
