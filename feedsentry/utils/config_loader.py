from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Union
from urllib.parse import urlparse

import yaml

from ..models import FeedDescriptor
from ..processors.geo import GeoHub


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing required fields."""


REQUIRED_FIELDS = {"name", "url"}


@dataclass(slots=True)
class FeedsConfig:
    feeds: List[FeedDescriptor] = field(default_factory=list)
    tiers: Dict[str, int] = field(default_factory=dict)
    locations: List[GeoHub] = field(default_factory=list)


def _validate_url(url: object, *, feed: str) -> str:
    url_str = str(url).strip()
    parsed = urlparse(url_str)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid URL '{url_str}' for feed '{feed}'. Must be absolute http(s) URL.")
    return url_str


def _coerce_feed(entry: dict) -> FeedDescriptor:
    """Validate and convert a single feed mapping from YAML.

    Required fields: name (str), url (http/https URL, or a mapping of
    language code to URL). Optional: lang (ISO 2-letter code), tier (1-5).
    """
    missing = REQUIRED_FIELDS - set(entry)
    if missing:
        raise ConfigError(f"Missing required fields: {sorted(missing)} in {entry}")

    name = str(entry["name"]).strip()
    if not name:
        raise ConfigError("Feed 'name' must be a non-empty string")

    raw_url = entry["url"]
    url: Union[str, Mapping[str, str]]
    if isinstance(raw_url, dict):
        if not raw_url:
            raise ConfigError(f"Feed '{name}' has an empty url mapping")
        url = {str(lang).strip().lower(): _validate_url(u, feed=name) for lang, u in raw_url.items()}
    else:
        url = _validate_url(raw_url, feed=name)

    lang = entry.get("lang")
    if lang is not None:
        lang = str(lang).strip().lower()
        if len(lang) != 2:
            raise ConfigError(f"Feed '{name}' lang must be a 2-letter code, got '{lang}'")

    tier = entry.get("tier")
    if tier is not None:
        try:
            tier = int(tier)
        except (TypeError, ValueError):
            raise ConfigError(f"Feed '{name}' tier must be an integer, got '{tier}'")
        if tier < 1:
            raise ConfigError(f"Feed '{name}' tier must be >= 1")

    return FeedDescriptor(name=name, url=url, lang=lang, tier=tier)


def _coerce_location(entry: dict) -> GeoHub:
    try:
        return GeoHub(
            name=str(entry["name"]).strip(),
            lat=float(entry["lat"]),
            lon=float(entry["lon"]),
            keywords=tuple(str(k).strip() for k in (entry.get("keywords") or [])),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid location entry {entry}: {exc}")


def load_feeds_config(path: Path | str) -> FeedsConfig:
    """Load ``feeds.yaml`` into typed configuration.

    YAML structure:
      - ``feeds``: list of mappings with ``name``, ``url`` (string or
        ``{lang: url}``), optional ``lang`` and ``tier``
      - ``tiers``: optional mapping of source name to authority tier
      - ``locations``: optional list of ``{name, lat, lon, keywords}`` hubs

    Tiers given inline on a feed win over the ``tiers`` table. Unknown
    top-level keys are ignored for forward compatibility.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}")

    if not isinstance(data, dict):
        raise ConfigError("Top-level YAML value must be a mapping")

    feeds_raw = data.get("feeds") or []
    if not isinstance(feeds_raw, list):
        raise ConfigError("'feeds' must be a list in the YAML configuration")

    tiers_raw = data.get("tiers") or {}
    if not isinstance(tiers_raw, dict):
        raise ConfigError("'tiers' must be a mapping of source name to tier")
    tiers: Dict[str, int] = {}
    for source, tier in tiers_raw.items():
        try:
            tiers[str(source)] = int(tier)
        except (TypeError, ValueError):
            raise ConfigError(f"Tier for source '{source}' must be an integer, got '{tier}'")

    feeds: List[FeedDescriptor] = []
    seen = set()
    for item in feeds_raw:
        if not isinstance(item, dict):
            raise ConfigError(f"Each feed must be a mapping, got: {type(item)}")
        feed = _coerce_feed(item)
        if feed.name in seen:
            raise ConfigError(f"Duplicate feed name '{feed.name}'")
        seen.add(feed.name)
        if feed.tier is not None:
            tiers[feed.name] = feed.tier
        feeds.append(feed)

    locations_raw = data.get("locations") or []
    if not isinstance(locations_raw, list):
        raise ConfigError("'locations' must be a list in the YAML configuration")
    locations = [_coerce_location(loc) for loc in locations_raw if isinstance(loc, dict)]

    return FeedsConfig(feeds=feeds, tiers=tiers, locations=locations)
