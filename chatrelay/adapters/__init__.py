"""Chat adapters — console and Discord."""

from chatrelay.registry import Registry

ADAPTERS: "Registry" = Registry("adapter")

from chatrelay.adapters.base import AdapterError, QueueAdapter  # noqa: E402
from chatrelay.adapters.console import ConsoleAdapter  # noqa: E402
from chatrelay.adapters.discord import DiscordAdapter  # noqa: E402

__all__ = [
    "ADAPTERS",
    "AdapterError",
    "QueueAdapter",
    "ConsoleAdapter",
    "DiscordAdapter",
]
