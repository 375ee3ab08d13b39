"""
In-memory fetcher serving a canned resource graph.
"""

import threading
from collections import Counter
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from link_crawler.concurrent.models import FetchResult
from link_crawler.concurrent.thread_safe import VisitedGuard
from link_crawler.utils.errors import NotFoundError
from .base import BaseFetcher


GraphSpec = Mapping[str, Union[FetchResult, Tuple[str, Sequence[str]]]]


DEMO_ROOT = "http://golang.org/"

DEMO_GRAPH: Dict[str, Tuple[str, List[str]]] = {
    "http://golang.org/": (
        "The Go Programming Language",
        [
            "http://golang.org/pkg/",
            "http://golang.org/cmd/",
        ],
    ),
    "http://golang.org/pkg/": (
        "Packages",
        [
            "http://golang.org/",
            "ç/",
            "http://golang.org/pkg/fmt/",
            "http://golang.org/pkg/os/",
        ],
    ),
    "http://golang.org/pkg/fmt/": (
        "Package fmt",
        [
            "http://golang.org/",
            "http://golang.org/pkg/",
        ],
    ),
    "http://golang.org/pkg/os/": (
        "Package os",
        [
            "http://golang.org/",
            "http://golang.org/pkg/",
        ],
    ),
}


class FixtureFetcher(BaseFetcher):
    """Fetcher backed by a dict of identifier -> (body, links)."""

    def __init__(self, graph: GraphSpec):
        self._pages: Dict[str, FetchResult] = {}
        for resource_id, page in graph.items():
            if isinstance(page, FetchResult):
                self._pages[resource_id] = FetchResult(page.body, list(page.links))
            else:
                body, links = page
                self._pages[resource_id] = FetchResult(body, list(links))
        self._calls: Counter = Counter()
        self._lock = threading.Lock()

    def fetch(self, resource_id: str, guard: Optional[VisitedGuard] = None) -> FetchResult:
        with self._lock:
            self._calls[resource_id] += 1
        return super().fetch(resource_id, guard)

    def _fetch(self, resource_id: str) -> FetchResult:
        page = self._pages.get(resource_id)
        if page is None:
            raise NotFoundError(resource_id)
        # Callers get their own list so they cannot mutate the fixture
        return FetchResult(page.body, list(page.links))

    def call_count(self, resource_id: Optional[str] = None) -> int:
        """Number of fetch calls, for one identifier or in total."""
        with self._lock:
            if resource_id is None:
                return sum(self._calls.values())
            return self._calls[resource_id]


def build_demo_fetcher(**_options) -> FixtureFetcher:
    """Fixture fetcher over the golang.org demonstration graph."""
    return FixtureFetcher(DEMO_GRAPH)
