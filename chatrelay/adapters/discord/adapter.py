"""Discord adapter — bridges a discord.Client to the relay queues.

Inbound messages use the Discord channel id (as a string) as their channel,
so replies land where the triggering message was posted.
"""

import asyncio
import logging
import os
import re
from typing import Callable, Dict, List, Optional, Set

import discord

from chatrelay.adapters import ADAPTERS
from chatrelay.adapters.base import AdapterError, QueueAdapter
from chatrelay.ports.inbound import Message

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


class RelayClient(discord.Client):
    """Thin discord.Client that forwards every message to a callback."""

    def __init__(self, on_relay_message: Callable[[discord.Message], None], **discord_kwargs):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.dm_messages = True
        super().__init__(intents=intents, **discord_kwargs)
        self._on_relay_message = on_relay_message

    async def on_ready(self):
        logger.info("Discord logged in as %s", self.user)

    async def on_message(self, message: discord.Message):
        self._on_relay_message(message)


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """Split on line breaks where possible, hard-cut lines longer than ``limit``."""
    chunks: List[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return [c for c in chunks if c.strip()]


def _mentions_name(body: str, name: str) -> bool:
    """True when ``@name`` appears as a whole word in the lowercased ``body``."""
    return re.search(rf"@{re.escape(name.lower())}(?![\w-])", body) is not None


@ADAPTERS.register("discord")
class DiscordAdapter(QueueAdapter):
    """Reads DISCORD_TOKEN from the adapter environment (or the process env)."""

    name = "discord"

    def __init__(
        self,
        environment: Optional[Dict[str, str]] = None,
        client_factory: Optional[Callable[..., discord.Client]] = None,
    ):
        super().__init__(environment)
        self.token = self.environment.get("DISCORD_TOKEN") or os.getenv("DISCORD_TOKEN", "")
        if not self.token:
            raise AdapterError("DISCORD_TOKEN is not set")
        self._client_factory = client_factory or RelayClient
        self.client: Optional[discord.Client] = None
        self._direct_channels: Set[str] = set()

    async def _connect(self) -> None:
        self.client = self._client_factory(self._on_discord_message)
        try:
            await self.client.login(self.token)
        except discord.LoginFailure as e:
            raise AdapterError(f"Discord login failed: {e}") from e
        self._spawn(self._run_client(), "gateway")

    async def _run_client(self) -> None:
        assert self.client is not None
        try:
            await self.client.connect(reconnect=True)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.report(AdapterError(f"Discord connection lost: {e}"))

    async def _disconnect(self) -> None:
        if self.client is not None and not self.client.is_closed():
            await self.client.close()

    def _on_discord_message(self, message: discord.Message) -> None:
        if self.client is None or message.author == self.client.user:
            return
        channel_id = str(message.channel.id)
        if isinstance(message.channel, discord.DMChannel):
            self._direct_channels.add(channel_id)
        self.emit(Message(channel=channel_id, body=message.content))

    def is_direct_message(self, message: Message) -> bool:
        return message.channel in self._direct_channels

    def is_mention(self, message: Message) -> bool:
        user = self.client.user if self.client else None
        if user is None:
            return False
        if f"<@{user.id}>" in message.body or f"<@!{user.id}>" in message.body:
            return True
        body = message.body.lower()
        names = {user.name}
        if getattr(user, "display_name", None):
            names.add(user.display_name)
        return any(_mentions_name(body, name) for name in names)

    async def _resolve_channel(self, channel_id: int):
        assert self.client is not None
        channel = self.client.get_channel(channel_id)
        if channel is None:
            channel = await self.client.fetch_channel(channel_id)
        return channel

    async def send(self, message: Message) -> None:
        if self.client is None:
            raise AdapterError("Discord client is not connected")
        chunks = split_message(message.body)
        if not chunks:
            logger.debug("Skipping empty reply for channel %s", message.channel)
            return
        channel = await self._resolve_channel(int(message.channel))
        for chunk in chunks:
            await channel.send(chunk)
