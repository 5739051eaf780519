"""Discord adapter package."""

from chatrelay.adapters.discord.adapter import DiscordAdapter

__all__ = ["DiscordAdapter"]
