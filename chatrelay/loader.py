"""Build adapters and plugins from the relay config.

Any failure is fatal: nothing partially loaded is kept.
"""

import asyncio
import logging
from typing import List, Sequence

from chatrelay.adapters import ADAPTERS
from chatrelay.config import AdapterConfig, PluginConfig, RelayConfig
from chatrelay.plugins import PLUGINS, BasePlugin

logger = logging.getLogger(__name__)


class StartupError(Exception):
    """Raised when the daemon cannot load its adapters or plugins."""


def load_adapters(configs: Sequence[AdapterConfig]) -> list:
    adapters = []
    for adapter_config in configs:
        try:
            adapter = ADAPTERS.create(adapter_config.name, environment=adapter_config.environment)
        except Exception as e:
            raise StartupError(f"Error loading adapter ({adapter_config.name}): {e}") from e
        logger.info("Adapter (%s) loaded.", adapter_config.name)
        adapters.append(adapter)
    return adapters


async def load_plugins(configs: Sequence[PluginConfig]) -> List[BasePlugin]:
    plugins: List[BasePlugin] = []
    try:
        for plugin_config in configs:
            try:
                plugin = PLUGINS.create(
                    plugin_config.type,
                    image=plugin_config.image,
                    command=plugin_config.command,
                    environment=plugin_config.environment,
                    filters=plugin_config.filters,
                    timeout=plugin_config.timeout,
                )
                await plugin.load()
            except Exception as e:
                raise StartupError(f"Error loading plugin ({plugin_config.label}): {e}") from e
            logger.info("Plugin (%s) loaded.", plugin_config.label)
            plugins.append(plugin)
    except (StartupError, asyncio.CancelledError, KeyboardInterrupt):
        await stop_plugins(plugins)
        raise
    return plugins


async def stop_plugins(plugins: Sequence) -> None:
    """Stop every plugin in order; a failure never skips the rest."""
    for plugin in plugins:
        try:
            await plugin.stop()
        except Exception as e:
            logger.error("Error stopping plugin (%s): %s", plugin.name, e)


async def load(config: RelayConfig):
    """Return ``(adapters, plugins)`` for ``config``."""
    if not config.adapters:
        raise StartupError("No adapters configured")
    adapters = load_adapters(config.adapters)
    plugins = await load_plugins(config.plugins)
    return adapters, plugins
