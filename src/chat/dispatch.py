"""Turns user intent into outbound messages, navigations or local actions."""

import logging

from src.chat.actions import ActionRegistry, Navigator
from src.chat.session import ChatSession
from src.models.schemas import Message, QuickOption, Sender

logger = logging.getLogger(__name__)


class Dispatcher:
    """Routes free text and quick-option clicks for one session.

    Args:
        session: Session that receives outbound messages.
        actions: Registry used for options that name an action.
        navigator: Opens option links.
    """

    def __init__(
        self,
        session: ChatSession,
        actions: ActionRegistry,
        navigator: Navigator,
    ) -> None:
        self._session = session
        self._actions = actions
        self._navigator = navigator

    async def submit_free_text(self, text: str) -> bool:
        """Send ``text`` as a user message.

        Blank text and a disconnected session are silently ignored.

        Returns:
            True if a message was appended and sent.
        """
        if not text or not text.strip():
            return False
        if not self._session.is_connected:
            logger.debug("Ignoring submission while not connected")
            return False
        return await self._session.send_text(text)

    async def select_option(self, option: QuickOption) -> None:
        """Handle a click on a quick option.

        Priority: link, then action, then plain reply with the label.
        """
        if option.link is not None:
            self._navigator.open_external(option.link, new_tab=True)
        elif option.action is not None:
            self._actions.invoke(option.action)
        else:
            await self.submit_free_text(option.label)

    def open_aux_link(self, message: Message) -> bool:
        """Open the auxiliary link of an assistant message, if it has one."""
        if message.sender is not Sender.ASSISTANT or not message.aux_link:
            return False
        self._navigator.open_external(message.aux_link, new_tab=True)
        return True
