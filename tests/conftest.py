"""Shared fakes: in-memory adapters and plugins built on the real base classes."""

import asyncio
import logging
from typing import List

import pytest

from chatrelay.adapters.base import QueueAdapter
from chatrelay.domain.models import PluginFilters
from chatrelay.plugins.base import BasePlugin, PluginError


class FakePlugin(BasePlugin):
    """Replies with a fixed string (or raises) and records every call."""

    def __init__(self, name, reply="", error=None, filters=None, calls=None, stops=None,
                 stop_error=None, delay=0.0):
        super().__init__(name, filters=filters)
        self.reply = reply
        self.error = error
        self.calls: List[tuple] = calls if calls is not None else []
        self.stops: List[str] = stops if stops is not None else []
        self.stop_error = stop_error
        self.delay = delay

    async def _invoke(self, text):
        self.calls.append((self.name, text))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply

    async def _teardown(self):
        self.stops.append(self.name)
        if self.stop_error is not None:
            raise self.stop_error


class FakeAdapter(QueueAdapter):
    """Collects replies in ``sent``; DM/mention answers are fixed per adapter."""

    def __init__(self, name="fake", direct=False, mention=False, start_error=None):
        super().__init__()
        self.name = name
        self.direct = direct
        self.mention = mention
        self.start_error = start_error
        self.sent: List = []
        self.closed = False
        self.reply_event = asyncio.Event()

    async def _connect(self):
        if self.start_error is not None:
            raise self.start_error

    async def _disconnect(self):
        self.closed = True

    def is_direct_message(self, message):
        return self.direct

    def is_mention(self, message):
        return self.mention

    async def send(self, message):
        self.sent.append(message)
        self.reply_event.set()


@pytest.fixture(autouse=True)
def reset_chatrelay_logger():
    """setup_logging() binds a handler to the captured stderr; drop it after each test."""
    yield
    logger = logging.getLogger("chatrelay")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def calls():
    return []


@pytest.fixture
def stops():
    return []


@pytest.fixture
def make_plugin(calls, stops):
    def _make(name, reply="", error=None, only_channels=None, only_direct_messages=False,
              only_mentions=False, stop_error=None, delay=0.0):
        filters = PluginFilters.build(
            only_channels=only_channels,
            only_direct_messages=only_direct_messages,
            only_mentions=only_mentions,
        )
        return FakePlugin(name, reply=reply, error=error, filters=filters, calls=calls,
                          stops=stops, stop_error=stop_error, delay=delay)
    return _make


@pytest.fixture
def make_adapter():
    def _make(name="fake", direct=False, mention=False, start_error=None):
        return FakeAdapter(name=name, direct=direct, mention=mention, start_error=start_error)
    return _make


@pytest.fixture
def plugin_error():
    return PluginError
