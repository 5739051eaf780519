"""Plugin eligibility rule shared by every adapter.

Adapters know what a "direct message" or a "mention" is on their surface;
this module only combines those answers with a plugin's filters.
"""

from chatrelay.domain.models import PluginFilters
from chatrelay.ports.inbound import Message


def is_eligible(
    filters: PluginFilters,
    message: Message,
    *,
    is_direct: bool,
    is_mention: bool,
) -> bool:
    """Return True when every restriction set on ``filters`` holds for ``message``."""
    if filters.only_channels and message.channel not in filters.only_channels:
        return False
    if filters.only_direct_messages and not is_direct:
        return False
    if filters.only_mentions and not is_mention:
        return False
    return True
