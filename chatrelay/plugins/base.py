"""Common plugin behaviour: filters, stop-once, timeout handling."""

import asyncio
import logging
from typing import Dict, Optional

from chatrelay.domain.models import PluginFilters

logger = logging.getLogger(__name__)


class PluginError(Exception):
    """Raised when a plugin fails to load or to produce a reply."""


class BasePlugin:
    """Implements PluginPort; subclasses provide ``_invoke`` and ``_teardown``."""

    def __init__(
        self,
        name: str,
        environment: Optional[Dict[str, str]] = None,
        filters: Optional[PluginFilters] = None,
        timeout: Optional[float] = None,
    ):
        self.name = name
        self.environment: Dict[str, str] = dict(environment or {})
        self.filters = filters or PluginFilters()
        self.timeout = timeout
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def load(self) -> None:
        """Prepare the plugin. Errors here abort daemon startup."""

    async def run(self, text: str) -> str:
        if self._stopped:
            raise PluginError(f"Plugin ({self.name}) is stopped")
        try:
            return await self._invoke(text)
        except asyncio.TimeoutError:
            raise PluginError(f"Plugin ({self.name}) timed out after {self.timeout}s")

    async def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        await self._teardown()
        logger.debug("Plugin (%s) stopped", self.name)

    async def _invoke(self, text: str) -> str:
        raise NotImplementedError

    async def _teardown(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
