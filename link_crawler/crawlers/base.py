"""
Abstract base classes and interfaces for fetchers.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from link_crawler.concurrent.models import FetchResult
from link_crawler.concurrent.thread_safe import VisitedGuard
from link_crawler.utils.errors import AlreadyVisitedError, ConfigurationError
from link_crawler.utils.logging import get_logger


logger = get_logger(__name__)


class BaseFetcher(ABC):
    """
    Turns a resource identifier into its body and outbound links.

    Fetchers hold no visited state of their own. A traversal that claims on
    fetch passes its run's ``VisitedGuard`` with every call; the identifier is
    claimed only once it has been found, so a missing resource keeps
    reporting ``NotFoundError`` however many links point at it.
    """

    def fetch(self, resource_id: str, guard: Optional[VisitedGuard] = None) -> FetchResult:
        """
        Fetch one resource.

        Args:
            resource_id: Identifier of the resource
            guard: Visited guard of the calling run, if it claims on fetch

        Returns:
            Body and ordered outbound links

        Raises:
            FetchError: AlreadyVisitedError, NotFoundError or TransportError
        """
        if guard is not None and guard.is_claimed(resource_id):
            raise AlreadyVisitedError(resource_id)
        result = self._fetch(resource_id)
        # Two concurrent requests may both find the resource; one keeps it
        if guard is not None and not guard.try_claim(resource_id):
            raise AlreadyVisitedError(resource_id)
        return result

    @abstractmethod
    def _fetch(self, resource_id: str) -> FetchResult:
        """Fetcher-specific retrieval of one identifier."""
        pass

    def close(self) -> None:
        """Release fetcher resources."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class FetcherRegistry:
    """Registry mapping fetcher names to fetcher factories."""

    def __init__(self):
        self._factories: Dict[str, Any] = {}

    def register(self, name: str, factory) -> None:
        """
        Register a fetcher factory.

        Args:
            name: Fetcher name used in configuration (e.g. 'fixture', 'http')
            factory: Callable accepting keyword options and
                returning a BaseFetcher
        """
        self._factories[name] = factory
        logger.debug("Fetcher registered", fetcher=name)

    def create(self, name: str, **options) -> BaseFetcher:
        """
        Build a fetcher by name.

        Raises:
            ConfigurationError: If no fetcher is registered under ``name``
        """
        if name not in self._factories:
            raise ConfigurationError(
                f"Fetcher '{name}' is not registered",
                {"available_fetchers": self.list_fetchers()}
            )
        return self._factories[name](**options)

    def list_fetchers(self):
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories
