"""
Observation sinks receiving traversal events.
"""

import sys
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Set, TextIO

from link_crawler.utils.errors import AlreadyVisitedError
from link_crawler.utils.logging import get_logger
from .models import TraversalEvent


logger = get_logger(__name__)


class TraversalObserver(ABC):
    """Receives one event per fetch outcome; called from task threads."""

    @abstractmethod
    def on_found(self, event: TraversalEvent) -> None:
        """Called after a resource was fetched successfully."""
        pass

    @abstractmethod
    def on_error(self, event: TraversalEvent) -> None:
        """Called after a fetch failed."""
        pass


class ResultCollector(TraversalObserver):
    """Thread-safe collector for traversal events."""

    def __init__(self):
        self._events: List[TraversalEvent] = []
        self._lock = threading.Lock()

    def on_found(self, event: TraversalEvent) -> None:
        with self._lock:
            self._events.append(event)

    def on_error(self, event: TraversalEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[TraversalEvent]:
        with self._lock:
            return self._events.copy()

    @property
    def found_ids(self) -> List[str]:
        """Identifiers of successful fetches in arrival order."""
        with self._lock:
            return [e.resource_id for e in self._events if e.succeeded]

    @property
    def failed_ids(self) -> List[str]:
        with self._lock:
            return [e.resource_id for e in self._events if not e.succeeded]

    def bodies(self) -> Dict[str, str]:
        with self._lock:
            return {e.resource_id: e.body for e in self._events if e.succeeded}

    def errors_of_type(self, error_type: type) -> Set[str]:
        with self._lock:
            return {e.resource_id for e in self._events if isinstance(e.error, error_type)}

    def get_summary(self) -> Dict[str, Any]:
        """
        Get summary statistics of all events.

        Returns:
            Dictionary with summary statistics
        """
        with self._lock:
            found = [e for e in self._events if e.succeeded]
            failed = [e for e in self._events if not e.succeeded]
            already_visited = [e for e in failed if isinstance(e.error, AlreadyVisitedError)]

            return {
                "total_events": len(self._events),
                "found": len(found),
                "failed": len(failed),
                "already_visited": len(already_visited),
                "distinct_found": len({e.resource_id for e in found}),
            }


class ConsoleObserver(TraversalObserver):
    """Prints each event on its own line."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream or sys.stdout
        self._lock = threading.Lock()

    def on_found(self, event: TraversalEvent) -> None:
        self._write(f'found: {event.resource_id} "{event.body}"')

    def on_error(self, event: TraversalEvent) -> None:
        self._write(str(event.error))

    def _write(self, line: str) -> None:
        with self._lock:
            print(line, file=self._stream, flush=True)


class LoggingObserver(TraversalObserver):
    """Writes a structured log line per event."""

    def __init__(self, logger_name: str = "link_crawler.events"):
        self.logger = get_logger(logger_name)

    def on_found(self, event: TraversalEvent) -> None:
        self.logger.info(
            "Resource fetched",
            resource_id=event.resource_id,
            depth=event.depth,
            body_length=len(event.body or "")
        )

    def on_error(self, event: TraversalEvent) -> None:
        self.logger.info(
            "Resource fetch failed",
            resource_id=event.resource_id,
            depth=event.depth,
            error_type=type(event.error).__name__,
            error_message=str(event.error)
        )


class CompositeObserver(TraversalObserver):
    """
    Forwards every event to each wrapped observer in order.

    A failing observer is logged and skipped so the ones after it still see
    the event.
    """

    def __init__(self, *observers: TraversalObserver):
        self.observers = list(observers)

    def on_found(self, event: TraversalEvent) -> None:
        for observer in self.observers:
            try:
                observer.on_found(event)
            except Exception as e:
                self._log_failure(observer, event, e)

    def on_error(self, event: TraversalEvent) -> None:
        for observer in self.observers:
            try:
                observer.on_error(event)
            except Exception as e:
                self._log_failure(observer, event, e)

    def _log_failure(self, observer: TraversalObserver, event: TraversalEvent, error: Exception) -> None:
        logger.error(
            "Observer failed",
            observer=type(observer).__name__,
            resource_id=event.resource_id,
            error_message=str(error)
        )
