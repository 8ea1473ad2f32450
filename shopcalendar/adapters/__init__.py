"""
Adapters for external data sources.
"""

from .memory_store import InMemoryShopStore

__all__ = ["InMemoryShopStore"]
