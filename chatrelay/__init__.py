"""chatrelay — routes chat adapter messages through sandboxed plugins."""

__version__ = "0.1.0"
