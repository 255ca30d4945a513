"""Append-only transcript of a chat session."""

from collections.abc import Iterator

from src.models.schemas import Message


class Transcript:
    """Ordered message log. Insertion order is display order.

    Messages are never reordered, deduplicated or removed. Two messages with
    the same remote id are two entries.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def all(self) -> tuple[Message, ...]:
        """Return a read-only snapshot of the transcript."""
        return tuple(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.all())

    def __bool__(self) -> bool:
        return bool(self._messages)
