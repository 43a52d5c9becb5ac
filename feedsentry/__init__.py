"""Top-level package for the feedsentry news pipeline.

This package contains the feed fetching, resilience, normalization and
threat classification layers, plus a small CLI entrypoint that polls a set
of configured feeds.
"""

__all__ = []
