"""Redis-backed event cache for Nostr clients."""

__version__ = "0.1.0"
