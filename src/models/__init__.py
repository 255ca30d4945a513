"""Pydantic models for the chat transcript and the endpoint wire contract.

Models:
    - Message: Immutable transcript entry (user or assistant)
    - QuickOption: Canned reply, external link or named local action
    - InboundMessage / OutboundMessage: ``receive-message`` / ``send-message`` payloads
    - ConnectionState, Sender: Enumerations shared by the core and the UI
"""

from src.models.schemas import (
    ConnectionState,
    InboundMessage,
    Message,
    OutboundMessage,
    ProtocolError,
    QuickOption,
    Sender,
    parse_inbound,
)

__all__ = [
    "ConnectionState",
    "InboundMessage",
    "Message",
    "OutboundMessage",
    "ProtocolError",
    "QuickOption",
    "Sender",
    "parse_inbound",
]
