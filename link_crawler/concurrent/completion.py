"""
Completion tracking for a dynamically sized set of concurrent tasks.

The tracker is a wait-group: a parent calls ``register()`` for every child
before the child is scheduled, each task calls ``deregister()`` exactly once
when it finishes, and the initiating caller blocks in ``wait()`` until the
outstanding count returns to zero. Nobody needs to know the size of the graph
up front.
"""

import threading
from typing import List, Optional

from link_crawler.utils.errors import CompletionTrackerError
from link_crawler.utils.logging import get_logger


logger = get_logger(__name__)


class CompletionTracker:
    """Register/deregister counter the traversal caller can block on."""

    def __init__(self):
        self._pending = 0
        self._registered = 0
        self._deregistered = 0
        self._history: List[int] = []
        self._condition = threading.Condition()

    def register(self) -> int:
        """
        Add one outstanding task.

        Must be called before the task it accounts for is scheduled.

        Returns:
            Outstanding count after registration
        """
        with self._condition:
            self._pending += 1
            self._registered += 1
            self._history.append(self._pending)
            return self._pending

    def deregister(self) -> int:
        """
        Remove one outstanding task; called once by a task as it finishes.

        Returns:
            Outstanding count after deregistration

        Raises:
            CompletionTrackerError: If there is no outstanding task to remove
        """
        with self._condition:
            if self._pending <= 0:
                raise CompletionTrackerError(
                    "deregister called with no outstanding tasks",
                    {"registered": self._registered, "deregistered": self._deregistered}
                )
            self._pending -= 1
            self._deregistered += 1
            self._history.append(self._pending)
            if self._pending == 0:
                self._condition.notify_all()
            return self._pending

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every registered task has deregistered.

        Args:
            timeout: Optional timeout in seconds (None waits indefinitely)

        Returns:
            True if the count reached zero, False if the timeout expired
        """
        with self._condition:
            completed = self._condition.wait_for(lambda: self._pending == 0, timeout=timeout)
        if not completed:
            logger.warning("Completion wait timed out", pending=self.pending, timeout=timeout)
        return completed

    @property
    def pending(self) -> int:
        with self._condition:
            return self._pending

    @property
    def registered_count(self) -> int:
        with self._condition:
            return self._registered

    @property
    def deregistered_count(self) -> int:
        with self._condition:
            return self._deregistered

    @property
    def tally_history(self) -> List[int]:
        """Outstanding count after each signal, in arrival order."""
        with self._condition:
            return list(self._history)

    def __repr__(self) -> str:
        return (
            f"CompletionTracker(pending={self.pending}, "
            f"registered={self.registered_count}, deregistered={self.deregistered_count})"
        )
