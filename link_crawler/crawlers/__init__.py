"""
Fetchers turning resource identifiers into content and outbound links.
"""

from .base import BaseFetcher, FetcherRegistry
from .fixture import FixtureFetcher, DEMO_GRAPH, DEMO_ROOT, build_demo_fetcher
from .http_fetcher import HTTPFetcher, build_http_fetcher, extract_links

# Default fetcher registry used by the command line entry point
default_registry = FetcherRegistry()
default_registry.register('fixture', build_demo_fetcher)
default_registry.register('http', build_http_fetcher)

__all__ = [
    'BaseFetcher',
    'FetcherRegistry',
    'FixtureFetcher',
    'HTTPFetcher',
    'DEMO_GRAPH',
    'DEMO_ROOT',
    'build_demo_fetcher',
    'build_http_fetcher',
    'extract_links',
    'default_registry'
]
