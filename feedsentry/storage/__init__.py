"""Durable key/value storage used as the second cache tier."""

from .durable_cache import DurableCache, JsonFileCache, MemoryCache

__all__ = ["DurableCache", "JsonFileCache", "MemoryCache"]
