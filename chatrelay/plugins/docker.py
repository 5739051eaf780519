"""Docker plugin — each invocation runs the image in a throwaway container."""

import asyncio
import logging
import uuid
from typing import Dict, Optional, Set

from chatrelay.domain.models import PluginFilters
from chatrelay.plugins import PLUGINS
from chatrelay.plugins.base import BasePlugin, PluginError
from chatrelay.plugins.process import run_process

logger = logging.getLogger(__name__)

DOCKER = "docker"


@PLUGINS.register("docker")
class DockerPlugin(BasePlugin):
    """Runs ``docker run --rm -i`` with the message body on stdin."""

    def __init__(
        self,
        image: str,
        environment: Optional[Dict[str, str]] = None,
        filters: Optional[PluginFilters] = None,
        timeout: Optional[float] = None,
        docker_bin: str = DOCKER,
        **_ignored,
    ):
        if not image:
            raise PluginError("docker plugin needs an image")
        super().__init__(image, environment, filters, timeout)
        self.image = image
        self.docker_bin = docker_bin
        self._running: Set[str] = set()

    async def _docker(self, *args: str, stdin_text: Optional[str] = None, timeout: Optional[float] = None):
        try:
            return await run_process([self.docker_bin, *args], stdin_text=stdin_text, timeout=timeout)
        except asyncio.TimeoutError:
            # TimeoutError is an OSError subclass on 3.11+
            raise
        except OSError as e:
            raise PluginError(f"Cannot run {self.docker_bin}: {e}") from e

    async def load(self) -> None:
        """Make sure the image is available locally, pulling it if needed."""
        result = await self._docker("image", "inspect", self.image)
        if result.returncode == 0:
            return
        logger.info("Pulling image %s", self.image)
        result = await self._docker("pull", self.image)
        if result.returncode != 0:
            raise PluginError(f"Cannot pull image {self.image}: {result.stderr.strip()}")

    def _run_args(self, container: str) -> list:
        args = ["run", "--rm", "-i", "--name", container]
        for key, value in self.environment.items():
            args.extend(["-e", f"{key}={value}"])
        args.append(self.image)
        return args

    async def _invoke(self, text: str) -> str:
        container = f"chatrelay-{uuid.uuid4().hex[:12]}"
        self._running.add(container)
        try:
            result = await self._docker(*self._run_args(container), stdin_text=text, timeout=self.timeout)
        except asyncio.TimeoutError:
            # killing the client does not stop the container
            await self._docker("rm", "-f", container)
            raise
        finally:
            self._running.discard(container)
        if result.returncode != 0:
            raise PluginError(
                f"Plugin ({self.image}) exit code {result.returncode}: {result.stderr.strip()}"
            )
        return result.stdout

    async def _teardown(self) -> None:
        for container in sorted(self._running):
            result = await self._docker("rm", "-f", container)
            if result.returncode != 0:
                logger.warning("Could not remove container %s: %s", container, result.stderr.strip())
        self._running.clear()
