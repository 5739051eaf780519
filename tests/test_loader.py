"""Tests for building adapters and plugins from config."""

import asyncio

import pytest

from chatrelay import loader
from chatrelay.adapters import ConsoleAdapter
from chatrelay.config import AdapterConfig, PluginConfig, RelayConfig
from chatrelay.plugins import CommandPlugin, DockerPlugin, PluginError
from chatrelay.loader import StartupError, load, load_adapters, load_plugins


def run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


@pytest.fixture
def no_docker_io(monkeypatch):
    """Skip the image check so DockerPlugin.load() never shells out."""
    async def loaded(self):
        return None

    monkeypatch.setattr(DockerPlugin, "load", loaded)


class TestLoadAdapters:
    def test_builds_in_order(self):
        adapters = load_adapters([AdapterConfig("console"), AdapterConfig("console", {"CONSOLE_CHANNEL": "b"})])
        assert [type(a) for a in adapters] == [ConsoleAdapter, ConsoleAdapter]
        assert adapters[1].channel == "b"

    def test_unknown_adapter(self):
        with pytest.raises(StartupError, match=r"Error loading adapter \(slack\)"):
            load_adapters([AdapterConfig("slack")])

    def test_adapter_construction_error(self, monkeypatch):
        monkeypatch.delenv("DISCORD_TOKEN", raising=False)
        with pytest.raises(StartupError, match="DISCORD_TOKEN"):
            load_adapters([AdapterConfig("discord")])


class TestLoadPlugins:
    def test_builds_with_filters(self, no_docker_io):
        configs = [
            PluginConfig(image="example/a", only_channels=("ops",), timeout=5.0),
            PluginConfig(type="command", command=("cat",), only_mentions=True),
        ]
        docker_plugin, command_plugin = run(load_plugins(configs))

        assert isinstance(docker_plugin, DockerPlugin)
        assert docker_plugin.filters.only_channels == frozenset({"ops"})
        assert docker_plugin.timeout == 5.0
        assert isinstance(command_plugin, CommandPlugin)
        assert command_plugin.filters.only_mentions is True

    def test_failure_stops_already_loaded(self, monkeypatch):
        stopped = []

        async def load(self):
            if self.image == "example/broken":
                raise PluginError("pull failed")

        async def teardown(self):
            stopped.append(self.image)

        monkeypatch.setattr(DockerPlugin, "load", load)
        monkeypatch.setattr(DockerPlugin, "_teardown", teardown)

        configs = [PluginConfig(image="example/ok"), PluginConfig(image="example/broken")]
        with pytest.raises(StartupError, match=r"Error loading plugin \(example/broken\): pull failed"):
            run(load_plugins(configs))
        assert stopped == ["example/ok"]


    def test_cancelled_load_stops_already_loaded(self, monkeypatch):
        stopped = []

        async def load(self):
            if self.image == "example/slow":
                await asyncio.sleep(10)

        async def teardown(self):
            stopped.append(self.image)

        monkeypatch.setattr(DockerPlugin, "load", load)
        monkeypatch.setattr(DockerPlugin, "_teardown", teardown)

        async def scenario():
            configs = [PluginConfig(image="example/ok"), PluginConfig(image="example/slow")]
            task = asyncio.create_task(load_plugins(configs))
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        run(scenario())
        assert stopped == ["example/ok"]


class TestLoad:
    def test_requires_an_adapter(self):
        with pytest.raises(StartupError, match="No adapters"):
            run(load(RelayConfig()))

    def test_returns_both(self, no_docker_io):
        config = RelayConfig(
            adapters=(AdapterConfig("console"),),
            plugins=(PluginConfig(image="example/a"),),
        )
        adapters, plugins = run(load(config))
        assert len(adapters) == 1 and len(plugins) == 1

    def test_stop_plugins_logs_and_continues(self, caplog):
        class Broken:
            name = "broken"

            async def stop(self):
                raise RuntimeError("gone")

        class Fine:
            name = "fine"
            stopped = False

            async def stop(self):
                self.stopped = True

        fine = Fine()
        run(loader.stop_plugins([Broken(), fine]))
        assert fine.stopped
        assert "Error stopping plugin (broken): gone" in caplog.text
