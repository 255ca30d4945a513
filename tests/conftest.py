"""Pytest fixtures and shared test configuration.

Fixtures:
    - chat_config: Explicit configuration, independent of the environment
    - channel: In-memory Transport Channel
    - navigator: Navigator that records opened URLs
    - session / connected_session: ChatSession over the fake channel
    - dispatcher: Dispatcher wired to the session and a real action registry
    - async_client: HTTPX client for API testing
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from src.api import app
from src.chat.actions import ActionRegistry
from src.chat.config import ChatConfig
from src.chat.dispatch import Dispatcher
from src.chat.session import ChatSession
from tests.fakes import FakeChannel, RecordingNavigator

PROMO_URL = "https://promo.example.test/offers"


@pytest.fixture
def chat_config() -> ChatConfig:
    """Return a configuration that ignores environment variables."""
    return ChatConfig(
        server_url="http://assistant.test:5001",
        transports=["websocket", "polling"],
        join_event="join",
        connect_timeout=2.0,
        support_number="1900633070",
        promo_url=PROMO_URL,
        assistant_name="Test Assistant",
    )


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def actions(navigator: RecordingNavigator, chat_config: ChatConfig) -> ActionRegistry:
    return ActionRegistry(navigator, chat_config.promo_url)


@pytest.fixture
def session(channel: FakeChannel, chat_config: ChatConfig) -> ChatSession:
    return ChatSession(channel, chat_config)


@pytest.fixture
async def connected_session(session: ChatSession) -> ChatSession:
    """Session that has completed its handshake (welcome message seeded)."""
    await session.open()
    return session


@pytest.fixture
def dispatcher(
    connected_session: ChatSession,
    actions: ActionRegistry,
    navigator: RecordingNavigator,
) -> Dispatcher:
    return Dispatcher(connected_session, actions, navigator)


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
