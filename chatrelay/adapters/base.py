"""Queue-backed adapter base class.

Subclasses connect to their surface in ``_connect``, call ``emit`` for each
inbound message and implement ``send`` for replies.
"""

import asyncio
import logging
from typing import Coroutine, Dict, List, Optional

from chatrelay.domain.eligibility import is_eligible
from chatrelay.ports.inbound import Message
from chatrelay.ports.outbound import AdapterChannels, PluginPort

logger = logging.getLogger(__name__)


class AdapterError(Exception):
    """Raised when an adapter cannot be built, started or cannot deliver."""


class QueueAdapter:
    """Implements AdapterPort on top of three asyncio queues."""

    name = "adapter"

    def __init__(self, environment: Optional[Dict[str, str]] = None):
        self.environment: Dict[str, str] = dict(environment or {})
        self.channels: Optional[AdapterChannels] = None
        self._tasks: List[asyncio.Task] = []

    async def start(self) -> AdapterChannels:
        if self.channels is not None:
            return self.channels
        self.channels = AdapterChannels()
        await self._connect()
        self._spawn(self._send_loop(), "sender")
        return self.channels

    async def close(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await self._disconnect()

    def emit(self, message: Message) -> None:
        """Queue an inbound message. Must be called on the event loop."""
        if self.channels is None:
            raise AdapterError(f"Adapter ({self.name}) is not started")
        self.channels.inbound.put_nowait(message)

    def report(self, error: BaseException) -> None:
        if self.channels is None:
            raise AdapterError(f"Adapter ({self.name}) is not started")
        self.channels.errors.put_nowait(error)

    def should_run(self, plugin: PluginPort, message: Message) -> bool:
        return is_eligible(
            plugin.filters,
            message,
            is_direct=self.is_direct_message(message),
            is_mention=self.is_mention(message),
        )

    def is_direct_message(self, message: Message) -> bool:
        return False

    def is_mention(self, message: Message) -> bool:
        return False

    async def send(self, message: Message) -> None:
        raise NotImplementedError

    async def _connect(self) -> None:
        pass

    async def _disconnect(self) -> None:
        pass

    def _spawn(self, coro: Coroutine, label: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=f"{self.name}-{label}")
        self._tasks.append(task)
        return task

    async def _send_loop(self) -> None:
        assert self.channels is not None
        while True:
            message = await self.channels.outbound.get()
            try:
                await self.send(message)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.report(AdapterError(f"Adapter ({self.name}) failed to send to {message.channel}: {e}"))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
