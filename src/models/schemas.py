"""Chat data model and the wire shapes exchanged with the assistant endpoint.

Provides type safety and validation for everything that crosses the
Transport Channel.

Models:
    - QuickOption: Selectable suggestion attached to an assistant message
    - Message: Immutable transcript entry
    - InboundMessage: Payload of the ``receive-message`` event
    - OutboundMessage: Payload of the ``send-message`` event
"""

import uuid
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)

# Wire event names
JOIN_EVENT = "join"
SEND_MESSAGE_EVENT = "send-message"
RECEIVE_MESSAGE_EVENT = "receive-message"


class Sender(str, Enum):
    """Message author, using the values the endpoint puts on the wire."""

    USER = "user"
    ASSISTANT = "bot"


class ConnectionState(str, Enum):
    """Lifecycle of a session's Transport Channel."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERRORED = "errored"


class ProtocolError(Exception):
    """Raised when an inbound payload does not match the wire contract."""

    pass


def utc_now() -> datetime:
    """Current UTC time at millisecond precision, the resolution of the wire format."""
    now = datetime.now(UTC)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def iso_timestamp(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC string with millisecond precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class QuickOption(BaseModel):
    """A clickable suggestion attached to an assistant message.

    Attributes:
        id: Identifier, unique within the owning message.
        label: Display text. Sent verbatim when the option is a plain reply.
        link: External URL to open instead of replying.
        action: Symbolic name of a local side-effect (see chat.actions).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str = Field(..., min_length=1)
    link: str | None = None
    action: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Accept numeric ids from the wire."""
        if isinstance(v, int | float):
            return str(v)
        return v

    @field_validator("link", "action", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def check_single_behaviour(self) -> "QuickOption":
        if self.link is not None and self.action is not None:
            raise ValueError("an option may carry a link or an action, not both")
        return self

    @property
    def kind(self) -> str:
        """One of ``link``, ``action`` or ``reply``."""
        if self.link is not None:
            return "link"
        if self.action is not None:
            return "action"
        return "reply"


class Message(BaseModel):
    """A single transcript entry. Never mutated once created.

    Attributes:
        id: Client-generated render key. Not used for ordering or identity.
        body: Rich text, may contain markdown.
        sender: Who wrote the message.
        sent_at: Timezone-aware creation time.
        options: Quick replies, assistant messages only.
        aux_link: Auxiliary URL, assistant messages only.
        remote_id: Id the endpoint attached to the message, if any.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    body: str
    sender: Sender
    sent_at: datetime = Field(default_factory=utc_now)
    options: tuple[QuickOption, ...] = ()
    aux_link: str | None = None
    remote_id: str | None = None

    @model_validator(mode="after")
    def check_user_has_no_affordances(self) -> "Message":
        if self.sender is Sender.USER and (self.options or self.aux_link):
            raise ValueError("user messages cannot carry options or links")
        return self


class InboundMessage(BaseModel):
    """Payload of the ``receive-message`` event.

    Unknown keys are ignored. ``sender`` must be ``"bot"``.
    """

    id: int | str | None = None
    text: str
    sender: Sender
    timestamp: datetime
    options: list[QuickOption] | None = None
    link: str | None = None

    @field_validator("options", mode="before")
    @classmethod
    def fill_option_ids(cls, v: Any) -> Any:
        """Options without an id are keyed by their position."""
        if not isinstance(v, list):
            return v
        filled = []
        for index, option in enumerate(v):
            if isinstance(option, Mapping) and option.get("id") in (None, ""):
                option = {**option, "id": str(index)}
            filled.append(option)
        return filled

    @field_validator("sender")
    @classmethod
    def must_be_assistant(cls, v: Sender) -> Sender:
        if v is not Sender.ASSISTANT:
            raise ValueError("inbound messages must come from the assistant")
        return v

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def to_message(self) -> Message:
        """Build a transcript entry with a fresh local id."""
        return Message(
            body=self.text,
            sender=Sender.ASSISTANT,
            sent_at=self.timestamp,
            options=tuple(self.options or ()),
            aux_link=self.link or None,
            remote_id=None if self.id is None else str(self.id),
        )


class OutboundMessage(BaseModel):
    """Payload of the ``send-message`` event.

    Serialized by alias: ``{"sessionId", "message", "timestamp"}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId", min_length=1)
    message: str = Field(..., min_length=1)
    timestamp: datetime

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        return iso_timestamp(value)

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


def parse_inbound(payload: Any) -> Message:
    """Validate a ``receive-message`` payload and convert it to a Message.

    Args:
        payload: Decoded event data as delivered by the channel.

    Returns:
        A new assistant Message.

    Raises:
        ProtocolError: If the payload is not a well-formed assistant message.
    """
    if not isinstance(payload, Mapping):
        raise ProtocolError(f"Expected an object, got {type(payload).__name__}")

    try:
        inbound = InboundMessage.model_validate(dict(payload))
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ProtocolError(
            f"Malformed {RECEIVE_MESSAGE_EVENT} payload (fields: {', '.join(fields) or '?'})"
        ) from e

    return inbound.to_message()
