"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional


@dataclass(frozen=True)
class PluginFilters:
    """Eligibility flags set once when a plugin is loaded."""

    only_channels: FrozenSet[str] = field(default_factory=frozenset)
    only_direct_messages: bool = False
    only_mentions: bool = False

    @classmethod
    def build(
        cls,
        only_channels: Optional[Iterable[str]] = None,
        only_direct_messages: bool = False,
        only_mentions: bool = False,
    ) -> "PluginFilters":
        return cls(
            only_channels=frozenset(str(c) for c in (only_channels or ())),
            only_direct_messages=bool(only_direct_messages),
            only_mentions=bool(only_mentions),
        )

    @property
    def unrestricted(self) -> bool:
        return not (self.only_channels or self.only_direct_messages or self.only_mentions)
