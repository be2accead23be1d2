"""Message source: outgoing chat messages, one per line."""

import random
from pathlib import Path
from typing import Protocol, Sequence

from ..errors import ConfigError


class IMessageSource(Protocol):
    """Supplies the text of the next outgoing message."""

    def pick(self) -> str:
        """Return one message."""
        ...


class MessageSource:
    """Picks messages uniformly at random from a fixed corpus."""

    def __init__(self, messages: Sequence[str], rng: random.Random | None = None):
        if not messages:
            raise ConfigError("message list is empty")
        self._messages = list(messages)
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> list[str]:
        return self._messages.copy()

    def pick(self) -> str:
        return self._rng.choice(self._messages)


def load_messages(path: str | Path, rng: random.Random | None = None) -> MessageSource:
    """Read messages from a text file, skipping blank lines.

    Raises:
        ConfigError: the file cannot be read or contains no messages.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    messages = [line.strip() for line in raw.splitlines()]
    messages = [m for m in messages if m]
    if not messages:
        raise ConfigError(f"{path.name} is empty")

    return MessageSource(messages, rng=rng)
