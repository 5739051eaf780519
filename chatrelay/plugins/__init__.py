"""Plugin backends — Docker images and local commands."""

from chatrelay.registry import Registry

PLUGINS: "Registry" = Registry("plugin type")

from chatrelay.plugins.base import BasePlugin, PluginError  # noqa: E402
from chatrelay.plugins.command import CommandPlugin  # noqa: E402
from chatrelay.plugins.docker import DockerPlugin  # noqa: E402

__all__ = [
    "PLUGINS",
    "BasePlugin",
    "PluginError",
    "CommandPlugin",
    "DockerPlugin",
]
