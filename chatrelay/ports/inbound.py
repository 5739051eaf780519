"""Inbound port — platform-agnostic message representation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Message:
    """Discord/console-agnostic message.

    ``channel`` is whatever string the adapter uses to route a reply back.
    """

    channel: str
    body: str

    def reply(self, body: str) -> "Message":
        """Build the outbound message for this one, on the same channel."""
        return Message(channel=self.channel, body=body)
