"""Shared utilities: logging, configuration loading, pipeline tunables."""
