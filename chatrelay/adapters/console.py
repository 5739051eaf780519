"""Console adapter — stdin in, stdout out. Handy for trying plugins locally."""

import asyncio
import logging
import re
import sys
import threading
from typing import Dict, Optional, TextIO

from chatrelay.adapters import ADAPTERS
from chatrelay.adapters.base import QueueAdapter
from chatrelay.ports.inbound import Message

logger = logging.getLogger(__name__)


@ADAPTERS.register("console")
class ConsoleAdapter(QueueAdapter):
    """Every line is a direct message; ``@<nick> ...`` also counts as a mention."""

    name = "console"

    def __init__(
        self,
        environment: Optional[Dict[str, str]] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ):
        super().__init__(environment)
        self.channel = self.environment.get("CONSOLE_CHANNEL", "console")
        self.nick = self.environment.get("CONSOLE_NICK", "relay")
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._reader: Optional[threading.Thread] = None

    async def _connect(self) -> None:
        loop = asyncio.get_running_loop()
        # daemon thread: a blocked readline() must not hold up process exit
        self._reader = threading.Thread(
            target=self._read_lines, args=(loop,), name="console-reader", daemon=True,
        )
        self._reader.start()

    def _read_lines(self, loop: asyncio.AbstractEventLoop) -> None:
        for line in self._stdin:
            body = line.rstrip("\n")
            if not body.strip():
                continue
            try:
                loop.call_soon_threadsafe(self.emit, Message(channel=self.channel, body=body))
            except RuntimeError:
                # event loop already closed
                return
        logger.info("Console input closed")

    def is_direct_message(self, message: Message) -> bool:
        return True

    def is_mention(self, message: Message) -> bool:
        pattern = rf"@{re.escape(self.nick.lower())}(?![\w-])"
        return re.match(pattern, message.body.lstrip().lower()) is not None

    async def send(self, message: Message) -> None:
        self._stdout.write(f"[{message.channel}] {message.body}\n")
        self._stdout.flush()
