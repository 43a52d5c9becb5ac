"""Application entrypoint for the feedsentry pipeline.

This script runs one poll:
1) load feed configuration
2) fetch, normalize and classify every feed through the resilience layer
3) escalate keyword-classified headlines to the remote classifier (optional)
4) print the newest items and the overall aggregate classification
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .analysis import ClusterMember, aggregate_threats, source_tier
from .fetchers import FeedCache, FeedCircuitBreaker, ResilientFeedFetcher
from .models import THREAT_LABELS, NewsItem
from .orchestrator import FeedOrchestrator
from .processors import GeoHubIndex
from .processors.ai import AIDispatchQueue, create_classification_client
from .storage import JsonFileCache, MemoryCache
from .utils.config_loader import ConfigError, FeedsConfig, load_feeds_config
from .utils.logging import configure_logging, get_logger
from .utils.pipeline_config import PipelineConfig

logger = get_logger("fs.main")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="feedsentry: fetch, normalize and classify news feeds")
    parser.add_argument(
        "--config",
        default="config/feeds.yaml",
        help="Path to feeds configuration file (YAML)",
    )
    parser.add_argument("--lang", default="en", help="Active UI language (2-letter code)")
    parser.add_argument(
        "--variant",
        default="full",
        choices=["full", "tech", "finance", "care"],
        help="Product variant; selects extra keyword tiers and AI limits",
    )
    parser.add_argument(
        "--cache-path",
        default=".cache/feeds.json",
        help="Durable feed cache file; pass an empty string to keep the cache in memory",
    )
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Keyword classification only; never call the remote classifier",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def format_item(item: NewsItem) -> str:
    label = THREAT_LABELS[item.threat.level]
    where = f" @{item.location_name}" if item.location_name else ""
    return (
        f"[{label:<4}] {item.pub_date:%Y-%m-%d %H:%M} {item.source}: {item.title}{where} "
        f"({item.threat.category.value}, {item.threat.confidence:.2f} {item.threat.source.value})"
    )


def build_orchestrator(args: argparse.Namespace, config: FeedsConfig, cfg: PipelineConfig) -> FeedOrchestrator:
    durable = (
        JsonFileCache(args.cache_path, default_ttl_seconds=cfg.durable_ttl_seconds) if args.cache_path else MemoryCache()
    )
    cache = FeedCache(
        durable,
        ttl_seconds=cfg.cache_ttl_seconds,
        max_entries=cfg.max_cache_entries,
        durable_ttl_seconds=cfg.durable_ttl_seconds,
    )
    breaker = FeedCircuitBreaker(threshold=cfg.max_failures, cooldown_seconds=cfg.cooldown_seconds)

    dispatcher = None
    client = None if args.no_ai else create_classification_client()
    if client is not None:
        dispatcher = AIDispatchQueue(
            client,
            max_per_window=cfg.ai_max_per_window(args.variant),
            window_seconds=cfg.ai_window_seconds,
            dedup_seconds=cfg.ai_dedup_seconds,
            batch_size=cfg.ai_batch_size,
            batch_delay=cfg.ai_batch_delay,
            rate_limit_pause=cfg.ai_rate_limit_pause,
            server_error_pause=cfg.ai_server_error_pause,
        )

    def _report(item: NewsItem) -> None:
        print(f"  reclassified -> {format_item(item)}")

    return FeedOrchestrator(
        ResilientFeedFetcher(cache, breaker),
        dispatcher,
        lang=args.lang,
        variant=args.variant,
        geo_lookup=GeoHubIndex(config.locations) if config.locations else None,
        http_timeout=cfg.http_timeout,
        on_reclassified=_report,
        max_ai_per_feed=cfg.ai_max_per_feed(args.variant),
    )


async def run_once(args: argparse.Namespace, config: FeedsConfig, cfg: PipelineConfig) -> List[NewsItem]:
    orch = build_orchestrator(args, config, cfg)

    def _on_batch(items: List[NewsItem]) -> None:
        logger.info("Partial results: %d items", len(items))

    try:
        items = await orch.fetch_category_feeds(
            config.feeds,
            batch_size=cfg.feed_batch_size,
            on_batch=_on_batch,
            top_limit=cfg.top_items,
        )
        for item in items:
            print(format_item(item))
        await orch.drain_escalations()
    finally:
        await orch.aclose()

    failures = orch.feed_failures()
    if failures:
        logger.warning("Feeds with recent failures: %s", ", ".join(sorted(failures)))

    overall = aggregate_threats(
        ClusterMember(threat=item.threat, tier=source_tier(item.source, config.tiers)) for item in items
    )
    print(
        f"Overall: {overall.level.value} / {overall.category.value} "
        f"(confidence {overall.confidence:.2f}, {len(items)} items)"
    )
    return items


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)

    config_path = Path(args.config)
    logger.info("Loading feed configuration from %s", config_path)
    try:
        config = load_feeds_config(config_path)
    except ConfigError as exc:
        logger.error("Failed to load configuration: %s", exc)
        return 1

    logger.info("Loaded %d feed(s)", len(config.feeds))
    asyncio.run(run_once(args, config, PipelineConfig()))
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
