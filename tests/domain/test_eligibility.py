"""Tests for the shared eligibility rule."""

from chatrelay.domain.eligibility import is_eligible
from chatrelay.domain.models import PluginFilters
from chatrelay.ports.inbound import Message


MSG = Message(channel="ops", body="ping")


class TestIsEligible:
    def test_no_flags_always_runs(self):
        assert is_eligible(PluginFilters(), MSG, is_direct=False, is_mention=False)

    def test_channel_allowlist(self):
        filters = PluginFilters.build(only_channels=["ops"])
        assert is_eligible(filters, MSG, is_direct=False, is_mention=False)
        assert not is_eligible(filters, Message("general", "ping"), is_direct=False, is_mention=False)

    def test_direct_only(self):
        filters = PluginFilters.build(only_direct_messages=True)
        assert not is_eligible(filters, MSG, is_direct=False, is_mention=True)
        assert is_eligible(filters, MSG, is_direct=True, is_mention=False)

    def test_mention_only(self):
        filters = PluginFilters.build(only_mentions=True)
        assert not is_eligible(filters, MSG, is_direct=True, is_mention=False)
        assert is_eligible(filters, MSG, is_direct=False, is_mention=True)

    def test_all_flags_must_hold(self):
        filters = PluginFilters.build(only_channels=["ops"], only_direct_messages=True, only_mentions=True)
        assert is_eligible(filters, MSG, is_direct=True, is_mention=True)
        assert not is_eligible(filters, MSG, is_direct=True, is_mention=False)
        assert not is_eligible(filters, Message("dm", "ping"), is_direct=True, is_mention=True)


class TestPluginFilters:
    def test_build_normalizes_channels(self):
        filters = PluginFilters.build(only_channels=[123, "ops"])
        assert filters.only_channels == frozenset({"123", "ops"})
        assert not filters.unrestricted

    def test_defaults_unrestricted(self):
        assert PluginFilters().unrestricted


class TestMessage:
    def test_reply_keeps_channel(self):
        reply = MSG.reply("pong")
        assert reply == Message("ops", "pong")
        assert MSG.body == "ping"
