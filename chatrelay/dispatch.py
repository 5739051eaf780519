"""Per-adapter dispatch loop.

One loop runs per adapter. It waits on three things at once: the next
inbound message, the next adapter error, and the shared stop event. Plugins
are invoked one after another in load order, so replies to a message keep
that order on the outbound queue.
"""

import asyncio
import logging
from typing import Optional, Sequence

from chatrelay.ports.inbound import Message
from chatrelay.ports.outbound import AdapterChannels, AdapterPort, PluginPort

logger = logging.getLogger(__name__)


def trim_reply(raw: str) -> str:
    """Drop exactly one trailing newline; everything else is kept as-is."""
    if raw.endswith("\n"):
        return raw[:-1]
    return raw


async def dispatch_message(
    adapter: AdapterPort,
    channels: AdapterChannels,
    plugins: Sequence[PluginPort],
    message: Message,
) -> int:
    """Run ``message`` through every eligible plugin. Returns replies queued."""
    logger.debug("Message received: %s", message)
    replies = 0
    for plugin in plugins:
        if not adapter.should_run(plugin, message):
            logger.debug("Not running plugin (%s) for: %s", plugin.name, message)
            continue
        logger.debug("Running plugin (%s) for: %s", plugin.name, message)

        try:
            raw = await plugin.run(message.body)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            channels.errors.put_nowait(e)
            continue

        body = trim_reply(raw)
        logger.debug("Plugin (%s) response: %s", plugin.name, body)
        channels.outbound.put_nowait(message.reply(body))
        replies += 1
    return replies


def _log_error(adapter: AdapterPort, error: BaseException) -> None:
    logger.error("Adapter (%s): %s", adapter.name, error)


def _cancel(*waits: Optional[asyncio.Future]) -> None:
    for wait in waits:
        if wait is not None and not wait.done():
            wait.cancel()


async def dispatch_loop(
    adapter: AdapterPort,
    channels: AdapterChannels,
    plugins: Sequence[PluginPort],
    stop: asyncio.Event,
) -> None:
    """Serve ``adapter`` until ``stop`` is set.

    The stop event is only looked at between messages; a plugin call in
    progress always runs to completion.
    """
    inbound_wait: Optional[asyncio.Future] = None
    error_wait: Optional[asyncio.Future] = None
    stop_wait = asyncio.ensure_future(stop.wait())
    try:
        while True:
            # pending gets are kept across iterations so no item is lost
            if inbound_wait is None:
                inbound_wait = asyncio.ensure_future(channels.inbound.get())
            if error_wait is None:
                error_wait = asyncio.ensure_future(channels.errors.get())

            done, _ = await asyncio.wait(
                {inbound_wait, error_wait, stop_wait},
                return_when=asyncio.FIRST_COMPLETED,
            )

            if error_wait in done:
                _log_error(adapter, error_wait.result())
                error_wait = None

            if stop_wait in done:
                if inbound_wait in done:
                    logger.debug("Dropping message received during shutdown: %s", inbound_wait.result())
                while not channels.errors.empty():
                    _log_error(adapter, channels.errors.get_nowait())
                logger.debug("Adapter (%s) dispatch loop stopping", adapter.name)
                return

            if inbound_wait in done:
                message = inbound_wait.result()
                inbound_wait = None
                await dispatch_message(adapter, channels, plugins, message)
    finally:
        _cancel(inbound_wait, error_wait, stop_wait)
