"""Unit tests for ChatSession lifecycle, inbound handling and outbound sends."""

import logging
import re
from datetime import datetime

import pytest
import pytest_check as check

from src.chat.config import ChatConfig
from src.chat.session import WELCOME_OPTIONS, WELCOME_TEXT, ChatSession, new_session_id
from src.models.schemas import (
    SEND_MESSAGE_EVENT,
    ConnectionState,
    Sender,
)
from tests.fakes import FakeChannel


def bot_payload(text: str = "Xin chào", **extra: object) -> dict:
    return {"id": 7, "text": text, "sender": "bot", "timestamp": "2026-10-19T08:30:00Z", **extra}


class TestSessionIdentity:
    """Tests for session id generation."""

    def test_format(self) -> None:
        assert re.fullmatch(r"user_\d{13}_[0-9a-f]{9}", new_session_id())

    def test_ids_are_unique(self) -> None:
        assert len({new_session_id() for _ in range(200)}) == 200

    def test_session_id_is_fixed_per_session(self, session: ChatSession) -> None:
        check.equal(session.session_id, session.session_id)
        check.not_equal(session.session_id, ChatSession(FakeChannel()).session_id)


class TestOpen:
    """Tests for the connection handshake."""

    def test_starts_disconnected(self, session: ChatSession) -> None:
        check.equal(session.state, ConnectionState.DISCONNECTED)
        check.equal(len(session.transcript), 0)

    async def test_connect_joins_and_seeds_welcome(
        self, session: ChatSession, channel: FakeChannel
    ) -> None:
        await session.open()

        check.equal(session.state, ConnectionState.CONNECTED)
        check.equal(channel.open_calls, [session.session_id])
        check.equal(channel.sent, [("join", session.session_id)])

        messages = session.transcript.all()
        check.equal(len(messages), 1)
        welcome = messages[0]
        check.equal(welcome.sender, Sender.ASSISTANT)
        check.equal(welcome.body, WELCOME_TEXT)
        check.equal(len(welcome.options), 3)
        check.equal([o.label for o in welcome.options], list(WELCOME_OPTIONS))
        check.is_true(all(o.link is None and o.action is None for o in welcome.options))

    async def test_custom_join_event(self, chat_config: ChatConfig, channel: FakeChannel) -> None:
        config = chat_config.model_copy(update={"join_event": "join-chat"})
        session = ChatSession(channel, config)

        await session.open()

        assert channel.sent[0] == ("join-chat", session.session_id)

    async def test_connecting_until_handshake_completes(self, chat_config: ChatConfig) -> None:
        channel = FakeChannel(auto_connect=False)
        session = ChatSession(channel, chat_config)

        await session.open()

        check.equal(session.state, ConnectionState.CONNECTING)
        check.equal(len(session.transcript), 0)

        await channel.simulate_connect()

        check.equal(session.state, ConnectionState.CONNECTED)
        check.equal(len(session.transcript), 1)

    async def test_open_is_noop_while_connecting_or_connected(
        self, session: ChatSession, channel: FakeChannel
    ) -> None:
        await session.open()
        await session.open()

        assert channel.open_calls == [session.session_id]

    async def test_connect_error_sets_errored(self, chat_config: ChatConfig) -> None:
        channel = FakeChannel(fail=True)
        session = ChatSession(channel, chat_config)

        await session.open()

        check.equal(session.state, ConnectionState.ERRORED)
        check.equal(len(session.transcript), 0)
        check.equal(channel.sent, [])

    async def test_retry_after_error(self, chat_config: ChatConfig) -> None:
        channel = FakeChannel(fail=True)
        session = ChatSession(channel, chat_config)
        await session.open()

        channel.fail = False
        await session.open()

        check.equal(session.state, ConnectionState.CONNECTED)
        check.equal(len(channel.open_calls), 2)


class TestDisconnect:
    """Tests for drops and reconnection."""

    async def test_drop_sets_disconnected(
        self, connected_session: ChatSession, channel: FakeChannel
    ) -> None:
        await channel.simulate_disconnect()

        check.equal(connected_session.state, ConnectionState.DISCONNECTED)
        check.equal(len(connected_session.transcript), 1)

    async def test_reopen_rejoins_without_second_welcome(
        self, connected_session: ChatSession, channel: FakeChannel
    ) -> None:
        await channel.simulate_disconnect()
        await connected_session.open()

        check.equal(connected_session.state, ConnectionState.CONNECTED)
        check.equal(channel.sent_events("join"), [connected_session.session_id] * 2)
        check.equal(len(connected_session.transcript), 1)


class TestInbound:
    """Tests for receive-message handling."""

    async def test_appends_in_arrival_order(
        self, connected_session: ChatSession, channel: FakeChannel
    ) -> None:
        for i in range(5):
            await channel.deliver(bot_payload(f"reply {i}"))

        bodies = [m.body for m in connected_session.transcript.all()[1:]]
        assert bodies == [f"reply {i}" for i in range(5)]

    async def test_duplicate_ids_are_not_deduplicated(
        self, connected_session: ChatSession, channel: FakeChannel
    ) -> None:
        await channel.deliver(bot_payload("same"))
        await channel.deliver(bot_payload("same"))

        messages = connected_session.transcript.all()[1:]
        check.equal(len(messages), 2)
        check.equal(messages[0].remote_id, messages[1].remote_id)
        check.not_equal(messages[0].id, messages[1].id)

    async def test_malformed_payload_is_dropped(
        self,
        connected_session: ChatSession,
        channel: FakeChannel,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="src.chat.session"):
            await channel.deliver({"sender": "bot", "timestamp": "2026-10-19T08:30:00Z"})
            await channel.deliver("not an object")
            await channel.deliver(bot_payload(sender="user"))

        check.equal(len(connected_session.transcript), 1)
        check.equal(caplog.text.count("Dropped inbound message"), 3)
        check.equal(connected_session.state, ConnectionState.CONNECTED)

    async def test_valid_message_after_violation_still_appended(
        self, connected_session: ChatSession, channel: FakeChannel
    ) -> None:
        await channel.deliver({})
        await channel.deliver(bot_payload("ok"))

        assert connected_session.transcript.last.body == "ok"


class TestSendText:
    """Tests for the outbound path."""

    async def test_appends_then_sends(
        self, connected_session: ChatSession, channel: FakeChannel
    ) -> None:
        result = await connected_session.send_text("Hello")

        message = connected_session.transcript.last
        sent = channel.sent_events(SEND_MESSAGE_EVENT)
        check.is_true(result)
        check.equal(message.sender, Sender.USER)
        check.equal(message.body, "Hello")
        check.equal(len(sent), 1)
        check.equal(sent[0]["sessionId"], connected_session.session_id)
        check.equal(sent[0]["message"], "Hello")
        sent_at = datetime.fromisoformat(sent[0]["timestamp"])
        check.greater_equal(sent_at, message.sent_at)

    async def test_refused_while_disconnected(
        self, session: ChatSession, channel: FakeChannel
    ) -> None:
        result = await session.send_text("Hello")

        check.is_false(result)
        check.equal(len(session.transcript), 0)
        check.equal(channel.sent, [])

    async def test_local_message_kept_when_send_fails(
        self, connected_session: ChatSession, channel: FakeChannel
    ) -> None:
        # Transport dropped without the session having been told yet
        channel._connected = False

        result = await connected_session.send_text("Hello")

        check.is_true(result)
        check.equal(connected_session.transcript.last.body, "Hello")
        check.equal(channel.sent_events(SEND_MESSAGE_EVENT), [])


class TestClose:
    """Tests for teardown."""

    async def test_close_releases_channel(
        self, connected_session: ChatSession, channel: FakeChannel
    ) -> None:
        await connected_session.close()

        check.equal(channel.close_calls, 1)
        check.is_false(channel.connected)
        check.is_true(connected_session.closed)
        check.equal(connected_session.state, ConnectionState.DISCONNECTED)

    async def test_close_before_open(self, session: ChatSession, channel: FakeChannel) -> None:
        await session.close()

        check.equal(channel.close_calls, 1)
        check.equal(session.state, ConnectionState.DISCONNECTED)

    async def test_events_after_close_are_ignored(
        self, connected_session: ChatSession, channel: FakeChannel
    ) -> None:
        await connected_session.close()
        await channel.deliver(bot_payload("late"))
        await channel.simulate_connect()

        check.equal(len(connected_session.transcript), 1)
        check.equal(connected_session.state, ConnectionState.DISCONNECTED)

    async def test_open_after_close_is_noop(
        self, connected_session: ChatSession, channel: FakeChannel
    ) -> None:
        await connected_session.close()
        await connected_session.open()

        check.equal(len(channel.open_calls), 1)
        check.equal(connected_session.state, ConnectionState.DISCONNECTED)

    async def test_close_mid_connect(self, chat_config: ChatConfig) -> None:
        channel = FakeChannel(auto_connect=False)
        session = ChatSession(channel, chat_config)
        await session.open()

        await session.close()
        await channel.simulate_connect()

        check.equal(channel.close_calls, 1)
        check.equal(session.state, ConnectionState.DISCONNECTED)
        check.equal(channel.sent, [])
        check.equal(len(session.transcript), 0)


class TestListeners:
    """Tests for change notifications."""

    async def test_notified_on_state_and_transcript_changes(
        self, session: ChatSession, channel: FakeChannel
    ) -> None:
        calls: list[tuple[ConnectionState, int]] = []
        session.subscribe(lambda: calls.append((session.state, len(session.transcript))))

        await session.open()
        await channel.deliver(bot_payload())
        await session.send_text("Hi")

        assert calls == [
            (ConnectionState.CONNECTING, 0),
            (ConnectionState.CONNECTED, 1),
            (ConnectionState.CONNECTED, 2),
            (ConnectionState.CONNECTED, 3),
        ]
