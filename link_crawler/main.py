"""
Command line entry point for the link crawler.
"""

import argparse
import sys
from typing import List, Optional

from config import ConfigManager, SystemConfig
from link_crawler.concurrent import (
    ClaimPolicy,
    CompositeObserver,
    ConsoleObserver,
    LoggingObserver,
    Traverser,
)
from link_crawler.crawlers import default_registry
from link_crawler.crawlers.base import BaseFetcher
from link_crawler.utils.errors import LinkCrawlerError, handle_error
from link_crawler.utils.logging import get_logger, setup_logging


logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="link-crawler",
        description="Depth-bounded concurrent traversal of linked resources"
    )
    parser.add_argument("--config", default="config.json", help="Path to JSON configuration file")
    parser.add_argument("--root", help="Identifier to start from")
    parser.add_argument("--depth", type=int, help="Maximum traversal depth")
    parser.add_argument("--fetcher", choices=default_registry.list_fetchers(), help="Fetcher to use")
    parser.add_argument(
        "--claim-policy",
        choices=[p.value for p in ClaimPolicy],
        help="Where duplicate identifiers are rejected"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level"
    )
    parser.add_argument("--timeout", type=float, help="Give up waiting after this many seconds")
    return parser


def apply_overrides(config: SystemConfig, args: argparse.Namespace) -> SystemConfig:
    """Command line flags take precedence over file and environment settings."""
    if args.root:
        config.traversal.root = args.root
    if args.depth is not None:
        config.traversal.max_depth = args.depth
    if args.fetcher:
        config.traversal.fetcher = args.fetcher
    if args.claim_policy:
        config.traversal.claim_policy = args.claim_policy
    if args.log_level:
        config.log_level = args.log_level
    if args.timeout is not None:
        config.traversal.wait_timeout = args.timeout
    return config


def build_fetcher(config: SystemConfig) -> BaseFetcher:
    """Create the configured fetcher; visited state belongs to each traversal run."""
    options = {}
    if config.traversal.fetcher == "http":
        options = {"timeout": config.http.timeout, "user_agent": config.http.user_agent}
    return default_registry.create(config.traversal.fetcher, **options)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = apply_overrides(ConfigManager(args.config).load_config(), args)
        setup_logging(config.log_level, config.log_file)

        with build_fetcher(config) as fetcher:
            traverser = Traverser(
                fetcher,
                observer=CompositeObserver(ConsoleObserver(), LoggingObserver()),
                claim_policy=config.claim_policy,
                wait_timeout=config.traversal.wait_timeout
            )
            traverser.traverse(config.traversal.root, config.traversal.max_depth)
    except LinkCrawlerError as e:
        handle_error(e, logger, {"stage": "traversal"}, reraise=False)
        print(f"error: {e.message}", file=sys.stderr)
        return 1

    summary = traverser.last_summary
    print(
        f"done: {summary.resources_fetched} fetched, {summary.fetch_failures} failed, "
        f"{summary.tasks_registered} tasks in {summary.execution_time:.2f}s"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
