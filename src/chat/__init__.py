"""Chat session core: connection lifecycle, transcript, dispatch and shell state.

Responsibilities:
    - Transport Channel to the Socket.IO assistant endpoint
    - Append-only transcript per session
    - Quick-option dispatch and the local action registry
    - Open / minimized / expanded / closed surface state

Has no knowledge of the rendering layer. The UI subscribes to sessions and
calls the shell and dispatcher.
"""

from src.chat.actions import ActionKind, ActionRegistry, Navigator, parse_action
from src.chat.config import ChatConfig, get_chat_config
from src.chat.dispatch import Dispatcher
from src.chat.session import ChatSession, new_session_id
from src.chat.shell import ChatShell, ShellPhase
from src.chat.transcript import Transcript
from src.chat.transport import SocketIOChannel, TransportChannel, TransportError

__all__ = [
    "ActionKind",
    "ActionRegistry",
    "ChatConfig",
    "ChatSession",
    "ChatShell",
    "Dispatcher",
    "Navigator",
    "ShellPhase",
    "SocketIOChannel",
    "Transcript",
    "TransportChannel",
    "TransportError",
    "get_chat_config",
    "new_session_id",
    "parse_action",
]
