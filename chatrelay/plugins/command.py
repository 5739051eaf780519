"""Local command plugin — runs an argv with the message on stdin."""

import asyncio
import os
from typing import Dict, Optional, Sequence

from chatrelay.domain.models import PluginFilters
from chatrelay.plugins import PLUGINS
from chatrelay.plugins.base import BasePlugin, PluginError
from chatrelay.plugins.process import run_process


@PLUGINS.register("command")
class CommandPlugin(BasePlugin):
    """Not sandboxed. Intended for development and tests."""

    def __init__(
        self,
        command: Sequence[str],
        environment: Optional[Dict[str, str]] = None,
        filters: Optional[PluginFilters] = None,
        timeout: Optional[float] = None,
        **_ignored,
    ):
        if not command:
            raise PluginError("command plugin needs a non-empty command")
        super().__init__(" ".join(command), environment, filters, timeout)
        self.command = list(command)

    async def _invoke(self, text: str) -> str:
        env = {**os.environ, **self.environment}
        try:
            result = await run_process(self.command, stdin_text=text, env=env, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise
        except OSError as e:
            raise PluginError(f"Plugin ({self.name}) could not start: {e}") from e
        if result.returncode != 0:
            raise PluginError(
                f"Plugin ({self.name}) exit code {result.returncode}: {result.stderr.strip()}"
            )
        return result.stdout
