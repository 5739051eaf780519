"""Port interfaces (Hexagonal Architecture)."""

from chatrelay.ports.inbound import Message
from chatrelay.ports.outbound import AdapterChannels, AdapterPort, PluginPort

__all__ = [
    "Message",
    "AdapterChannels",
    "AdapterPort",
    "PluginPort",
]
