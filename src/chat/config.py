"""Chat client configuration with environment variable loading.

Pydantic-based configuration for the Transport Channel and the local
action registry. Values come from the environment (and a ``.env`` file).
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from src.models.schemas import JOIN_EVENT

# Load environment variables from .env file
load_dotenv()

SUPPORTED_TRANSPORTS = ("websocket", "polling")


def _env_transports() -> list[str]:
    raw = os.getenv("CHAT_TRANSPORTS", ",".join(SUPPORTED_TRANSPORTS))
    return [t.strip() for t in raw.split(",") if t.strip()]


class ChatConfig(BaseModel):
    """Configuration for the chat client.

    Attributes:
        server_url: Socket.IO endpoint of the remote assistant.
        transports: Socket.IO transports to try, in order.
        join_event: Event announcing the session after connecting.
        connect_timeout: Seconds to wait for the connection handshake.
        support_number: Telephone number behind the ``call_<number>`` action.
        promo_url: Target of the ``redirect_to_promo_page`` action.
        assistant_name: Title shown in the chat header.
    """

    server_url: str = Field(
        default_factory=lambda: os.getenv("CHAT_SERVER_URL", "http://localhost:5001"),
        description="Socket.IO server URL",
    )
    transports: list[str] = Field(
        default_factory=_env_transports,
        description="Socket.IO transports in order of preference",
    )
    join_event: str = Field(
        default_factory=lambda: os.getenv("CHAT_JOIN_EVENT", JOIN_EVENT),
        min_length=1,
        description="Event used to announce the session id",
    )
    connect_timeout: float = Field(
        default_factory=lambda: float(os.getenv("CHAT_CONNECT_TIMEOUT", "5")),
        gt=0.0,
        le=60.0,
        description="Connection handshake timeout in seconds",
    )
    support_number: str = Field(
        default_factory=lambda: os.getenv("CHAT_SUPPORT_NUMBER", "1900633070"),
        pattern=r"^\d+$",
        description="Support hotline",
    )
    promo_url: str = Field(
        default_factory=lambda: os.getenv(
            "CHAT_PROMO_URL", "https://lottefinance.vn/promotions"
        ),
        description="Promotions page",
    )
    assistant_name: str = Field(
        default_factory=lambda: os.getenv("CHAT_ASSISTANT_NAME", "Lotte Finance Assistant"),
        description="Display name of the assistant",
    )

    @field_validator("server_url")
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        """Validate that the server URL uses a scheme Socket.IO understands."""
        v = v.strip()
        if not v.startswith(("http://", "https://", "ws://", "wss://")):
            raise ValueError(
                "CHAT_SERVER_URL must start with http://, https://, ws:// or wss://"
            )
        return v

    @field_validator("transports")
    @classmethod
    def validate_transports(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one transport is required")
        unknown = [t for t in v if t not in SUPPORTED_TRANSPORTS]
        if unknown:
            raise ValueError(f"Unsupported transports: {', '.join(unknown)}")
        return v

    @field_validator("promo_url")
    @classmethod
    def validate_promo_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("CHAT_PROMO_URL must be an http(s) URL")
        return v


def get_chat_config() -> ChatConfig:
    """Create chat configuration from environment.

    Returns:
        Configured ChatConfig instance.

    Raises:
        ValidationError: If an environment value is invalid.
    """
    return ChatConfig()
