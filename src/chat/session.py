"""Chat session: identity, connection state and transcript of one conversation.

A ChatSession owns its Transport Channel exclusively. All mutations happen
on the event loop, either from channel callbacks (inbound path) or from
``send_text`` (outbound path), so ordering between them is call order.
"""

import logging
import time
import uuid
from collections.abc import Callable
from typing import Any

from src.chat.config import ChatConfig, get_chat_config
from src.chat.transcript import Transcript
from src.chat.transport import (
    CONNECT,
    CONNECT_ERROR,
    DISCONNECT,
    TransportChannel,
    TransportError,
)
from src.models.schemas import (
    RECEIVE_MESSAGE_EVENT,
    SEND_MESSAGE_EVENT,
    ConnectionState,
    Message,
    OutboundMessage,
    ProtocolError,
    QuickOption,
    Sender,
    parse_inbound,
)

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Chào bạn! Tôi là trợ lý ảo của LOTTE Finance, bạn có thể cho tôi biết "
    "tôi có thể giúp gì cho bạn hôm nay không ạ?"
)
WELCOME_OPTIONS = (
    "Tư vấn đăng ký khoản vay tín chấp",
    "Tư vấn mở thẻ tín dụng",
    "Tư vấn đăng ký sản phẩm khác (Vay ô tô, Trả góp Y tế/Giáo dục, Mua trước trả sau)",
)

Listener = Callable[[], Any]


def new_session_id() -> str:
    """Generate a client-scoped id: ``user_<epoch millis>_<9 random hex chars>``."""
    return f"user_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def welcome_message() -> Message:
    """The greeting shown once the first connection succeeds."""
    return Message(
        body=WELCOME_TEXT,
        sender=Sender.ASSISTANT,
        options=tuple(
            QuickOption(id=str(i), label=label)
            for i, label in enumerate(WELCOME_OPTIONS, start=1)
        ),
    )


class ChatSession:
    """One conversation with the remote assistant.

    Attributes:
        session_id: Immutable identifier sent with every outbound message.
        state: Current ConnectionState of the channel.
        transcript: Ordered message history.
    """

    def __init__(
        self,
        channel: TransportChannel,
        config: ChatConfig | None = None,
    ) -> None:
        self.session_id: str = new_session_id()
        self.state: ConnectionState = ConnectionState.DISCONNECTED
        self.transcript = Transcript()
        self._config = config or get_chat_config()
        self._channel = channel
        self._closed = False
        self._listeners: list[Listener] = []

        channel.on_event(CONNECT, self._handle_connect)
        channel.on_event(DISCONNECT, self._handle_disconnect)
        channel.on_event(CONNECT_ERROR, self._handle_connect_error)
        channel.on_event(RECEIVE_MESSAGE_EVENT, self._handle_receive)

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: Listener) -> None:
        """Register a callback run after every state or transcript change."""
        self._listeners.append(listener)

    async def open(self) -> None:
        """Connect the channel.

        Can be called again after a disconnect or an error to retry. Does
        nothing while a connection is up or in progress, or once closed.
        """
        if self._closed:
            logger.warning(f"Session {self.session_id} is closed, not reopening")
            return
        if self.state in (ConnectionState.CONNECTING, ConnectionState.CONNECTED):
            return

        self._set_state(ConnectionState.CONNECTING)
        try:
            await self._channel.open(self.session_id)
        except TransportError as e:
            logger.error(f"Failed to open channel for {self.session_id}: {e}")
            self._set_state(ConnectionState.ERRORED)

    async def close(self) -> None:
        """Tear the session down. The channel is always closed."""
        self._closed = True
        try:
            await self._channel.close()
        finally:
            self._set_state(ConnectionState.DISCONNECTED)

    async def send_text(self, text: str) -> bool:
        """Append a user message and forward it to the endpoint.

        The local append is never rolled back; a failed send only shows up
        through the channel's own lifecycle events.

        Returns:
            False if the session is not connected and nothing happened.
        """
        if not self.is_connected:
            return False

        message = Message(body=text, sender=Sender.USER)
        self.transcript.append(message)
        self._notify()

        payload = OutboundMessage(
            session_id=self.session_id,
            message=text,
            timestamp=message.sent_at,
        )
        await self._channel.send(SEND_MESSAGE_EVENT, payload.to_wire())
        return True

    async def _handle_connect(self) -> None:
        if self._closed:
            return
        self._set_state(ConnectionState.CONNECTED, notify=False)
        await self._channel.send(self._config.join_event, self.session_id)
        if not self.transcript:
            self.transcript.append(welcome_message())
        self._notify()

    def _handle_disconnect(self) -> None:
        if self._closed or self.state is not ConnectionState.CONNECTED:
            return
        self._set_state(ConnectionState.DISCONNECTED)

    def _handle_connect_error(self, error: Any = None) -> None:
        if self._closed:
            return
        logger.warning(f"Session {self.session_id} could not connect: {error}")
        self._set_state(ConnectionState.ERRORED)

    def _handle_receive(self, payload: Any) -> None:
        if self._closed:
            return
        try:
            message = parse_inbound(payload)
        except ProtocolError as e:
            logger.warning(f"Dropped inbound message: {e}")
            return

        self.transcript.append(message)
        self._notify()

    def _set_state(self, state: ConnectionState, notify: bool = True) -> None:
        if state is self.state:
            return
        logger.info(f"Session {self.session_id}: {self.state.value} -> {state.value}")
        self.state = state
        if notify:
            self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
