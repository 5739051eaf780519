"""Relay daemon — starts one dispatch loop per adapter and shuts them down.

Lifecycle: STARTING -> RUNNING -> SHUTTING_DOWN -> STOPPED. A single
interrupt sets one shared event that every dispatch loop waits on; once all
loops have returned, adapters are closed and each plugin is stopped once,
in load order.
"""

import asyncio
import enum
import logging
import signal
from typing import List, Sequence

from chatrelay.dispatch import dispatch_loop
from chatrelay.loader import StartupError, stop_plugins
from chatrelay.ports.outbound import AdapterChannels, AdapterPort, PluginPort

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class DaemonState(enum.Enum):
    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class RelayDaemon:
    """Owns the adapters, the frozen plugin list and the shutdown event."""

    def __init__(self, adapters: Sequence[AdapterPort], plugins: Sequence[PluginPort]):
        self.adapters = tuple(adapters)
        self.plugins = tuple(plugins)
        self.state = DaemonState.STARTING
        self._stop = asyncio.Event()
        self._signals_installed: List[signal.Signals] = []
        self._torn_down = False

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def request_shutdown(self, reason: str = "interrupt") -> None:
        """Release every dispatch loop. Extra calls are ignored."""
        if self._stop.is_set():
            logger.info("Shutdown already in progress (%s)", reason)
            return
        logger.info("Shutdown requested (%s)", reason)
        self._stop.set()

    async def run(self, install_signal_handlers: bool = True) -> None:
        if self.state is not DaemonState.STARTING:
            raise RuntimeError(f"Daemon cannot run from state {self.state.value}")

        channels = await self._start_adapters()
        if install_signal_handlers:
            self._install_signal_handlers()

        self.state = DaemonState.RUNNING
        workers = [
            asyncio.create_task(
                self._worker(adapter, adapter_channels),
                name=f"dispatch-{adapter.name}-{index}",
            )
            for index, (adapter, adapter_channels) in enumerate(zip(self.adapters, channels))
        ]
        logger.info("Relaying %d adapter(s) through %d plugin(s)", len(workers), len(self.plugins))

        try:
            await asyncio.gather(*workers)
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            self.state = DaemonState.SHUTTING_DOWN
            try:
                await self._close_adapters(self.adapters)
                await self.teardown()
            finally:
                # handlers stay in place so a second interrupt cannot cut teardown short
                self._remove_signal_handlers()
                self.state = DaemonState.STOPPED

    async def teardown(self) -> None:
        """Stop each plugin exactly once, in load order."""
        if self._torn_down:
            return
        self._torn_down = True
        logger.info("Teardown...")
        await stop_plugins(self.plugins)

    async def _start_adapters(self) -> List[AdapterChannels]:
        channels: List[AdapterChannels] = []
        for adapter in self.adapters:
            try:
                channels.append(await adapter.start())
            except Exception as e:
                self.state = DaemonState.STOPPED
                await self._close_adapters(self.adapters[: len(channels) + 1])
                await self.teardown()
                raise StartupError(f"Error starting adapter ({adapter.name}): {e}") from e
        return channels

    async def _worker(self, adapter: AdapterPort, channels: AdapterChannels) -> None:
        try:
            await dispatch_loop(adapter, channels, self.plugins, self._stop)
        except Exception:
            logger.exception("Adapter (%s) dispatch loop crashed", adapter.name)
            self.request_shutdown(f"{adapter.name} crashed")

    async def _close_adapters(self, adapters: Sequence[AdapterPort]) -> None:
        for adapter in adapters:
            try:
                await adapter.close()
            except Exception as e:
                logger.error("Error closing adapter (%s): %s", adapter.name, e)

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, self.request_shutdown, sig.name)
            except (NotImplementedError, RuntimeError):
                # not available on this platform or outside the main thread
                continue
            self._signals_installed.append(sig)

    def _remove_signal_handlers(self) -> None:
        if not self._signals_installed:
            return
        loop = asyncio.get_running_loop()
        for sig in self._signals_installed:
            loop.remove_signal_handler(sig)
        self._signals_installed = []
