"""Domain layer — pure Python, no framework dependencies."""

from chatrelay.domain.models import PluginFilters
from chatrelay.domain.eligibility import is_eligible

__all__ = [
    "PluginFilters",
    "is_eligible",
]
