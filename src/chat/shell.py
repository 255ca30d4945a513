"""Visibility state machine of the chat surface.

Phases:
    CLOSED          no session exists
    OPEN            chat visible
    OPEN_MINIMIZED  chat collapsed to a bar, session still connected

``expanded`` is an orthogonal layout flag. It survives minimizing so that
restoring the chat brings the expanded layout back.
"""

import logging
from collections.abc import Callable
from enum import Enum

from src.chat.actions import ActionRegistry, Navigator
from src.chat.dispatch import Dispatcher
from src.chat.session import ChatSession

logger = logging.getLogger(__name__)


class ShellPhase(Enum):
    CLOSED = "closed"
    OPEN = "open"
    OPEN_MINIMIZED = "open_minimized"


class ChatShell:
    """Surface-level controls: start, close, minimize and expand.

    Args:
        session_factory: Builds a new session (with its own channel) per start.
        actions: Action registry handed to each Dispatcher.
        navigator: Navigator handed to each Dispatcher.
    """

    def __init__(
        self,
        session_factory: Callable[[], ChatSession],
        actions: ActionRegistry,
        navigator: Navigator,
    ) -> None:
        self._session_factory = session_factory
        self._actions = actions
        self._navigator = navigator
        self.visible = False
        self.minimized = False
        self.expanded = False
        self.session: ChatSession | None = None
        self.dispatcher: Dispatcher | None = None

    @property
    def phase(self) -> ShellPhase:
        if not self.visible:
            return ShellPhase.CLOSED
        return ShellPhase.OPEN_MINIMIZED if self.minimized else ShellPhase.OPEN

    @property
    def effective_expanded(self) -> bool:
        """Whether the expanded layout is currently shown."""
        return self.visible and self.expanded and not self.minimized

    async def start(self) -> None:
        """Open the chat, creating and connecting a fresh session if closed."""
        if self.visible:
            self.minimized = False
            return

        self.session = self._session_factory()
        self.dispatcher = Dispatcher(self.session, self._actions, self._navigator)
        self.visible = True
        self.minimized = False
        logger.info(f"Chat started with session {self.session.session_id}")
        await self.session.open()

    async def close(self) -> None:
        """Close the chat from any phase and discard the session."""
        session = self.session
        self.session = None
        self.dispatcher = None
        self.visible = False
        self.minimized = False
        self.expanded = False
        if session is not None:
            await session.close()
            logger.info(f"Chat closed for session {session.session_id}")

    def toggle_minimize(self) -> None:
        if not self.visible:
            return
        self.minimized = not self.minimized

    def toggle_expand(self) -> None:
        """Flip the expanded layout. From the minimized bar, always expand."""
        if not self.visible:
            return
        if self.minimized:
            self.expanded = True
        else:
            self.expanded = not self.expanded
        self.minimized = False
