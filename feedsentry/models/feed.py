from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Union

SCOPE_SEPARATOR = "::"
DEFAULT_LANG = "en"


@dataclass(frozen=True, slots=True)
class FeedDescriptor:
    """Configuration for a syndicated news source (RSS or Atom)."""

    name: str
    url: Union[str, Mapping[str, str]]
    lang: Optional[str] = None
    tier: Optional[int] = None

    def resolve_url(self, lang: str) -> str:
        if isinstance(self.url, str):
            return self.url
        if self.url.get(lang):
            return self.url[lang]
        if self.url.get(DEFAULT_LANG):
            return self.url[DEFAULT_LANG]
        return next(iter(self.url.values()), "")


@dataclass(frozen=True, slots=True)
class FeedScope:
    """Cache and breaker key: the same feed is cached separately per UI language."""

    feed_name: str
    lang: str = DEFAULT_LANG

    @property
    def key(self) -> str:
        return f"{self.feed_name}{SCOPE_SEPARATOR}{self.lang}"

    @property
    def durable_key(self) -> str:
        return f"feed:{self.key}"

    @property
    def legacy_durable_key(self) -> str:
        # Older caches stored feeds without a language suffix
        return f"feed:{self.feed_name}"

    def __str__(self) -> str:
        return self.key
