"""Outbound ports — interfaces the dispatch loop needs from its collaborators."""

import asyncio
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from chatrelay.domain.models import PluginFilters
from chatrelay.ports.inbound import Message


@dataclass
class AdapterChannels:
    """The three queues an adapter hands out when it starts."""

    inbound: "asyncio.Queue[Message]" = field(default_factory=asyncio.Queue)
    outbound: "asyncio.Queue[Message]" = field(default_factory=asyncio.Queue)
    errors: "asyncio.Queue[BaseException]" = field(default_factory=asyncio.Queue)


@runtime_checkable
class PluginPort(Protocol):
    """Interface for sandboxed responders."""

    name: str
    filters: PluginFilters

    async def run(self, text: str) -> str: ...

    async def stop(self) -> None: ...


@runtime_checkable
class AdapterPort(Protocol):
    """Interface for chat surface connectors."""

    name: str

    async def start(self) -> AdapterChannels: ...

    def should_run(self, plugin: PluginPort, message: Message) -> bool: ...

    async def close(self) -> None: ...
