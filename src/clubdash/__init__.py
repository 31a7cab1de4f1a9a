"""Club administration dashboard backend: TTL caching, prioritized loading and running balances."""

__version__ = "0.1.0"
