"""
Depth-bounded concurrent traversal of a linked resource graph.

Every traversal task runs on its own thread; there is no worker pool and no
cap on fan-out. The initiating caller registers the root task, starts it and
then blocks on a ``CompletionTracker`` until every task that was ever
registered has finished.

Two rules keep the count honest:

* a parent registers a child with the tracker before starting the child's
  thread, so the count cannot reach zero while the child is in flight;
* each task deregisters itself in a ``finally`` block, so every exit path
  (depth exhausted, fetch failed, children spawned) deregisters exactly once.
"""

import threading
from datetime import datetime
from typing import Optional

from link_crawler.utils.errors import (
    AlreadyVisitedError,
    FetchError,
    TransportError,
    TraversalTimeoutError,
    ValidationError,
)
from link_crawler.utils.logging import get_logger
from .completion import CompletionTracker
from .models import (
    ClaimPolicy,
    ResourceID,
    TraversalEvent,
    TraversalSummary,
    TraversalTask,
)
from .observers import LoggingObserver, TraversalObserver
from .thread_safe import ThreadSafeCounter, VisitedGuard


logger = get_logger(__name__)


class TraversalRun:
    """
    State shared by all tasks of one traversal.

    The tracker, the guard and the counters belong to the run, not to any
    task; tasks only hold a reference to the run while they execute.
    """

    def __init__(
        self,
        fetcher,
        observer: TraversalObserver,
        claim_policy: ClaimPolicy,
        root: ResourceID,
        max_depth: int
    ):
        self.fetcher = fetcher
        self.observer = observer
        self.claim_policy = claim_policy
        self.tracker = CompletionTracker()
        self.guard = VisitedGuard()
        self.summary = TraversalSummary(root=root, max_depth=max_depth, claim_policy=claim_policy)

        self._fetched = ThreadSafeCounter()
        self._failed = ThreadSafeCounter()
        self._already_visited = ThreadSafeCounter()
        self._duplicates_skipped = ThreadSafeCounter()

    @property
    def _fetch_guard(self) -> Optional[VisitedGuard]:
        """The guard handed to the fetcher; None when claims happen on spawn."""
        return self.guard if self.claim_policy is ClaimPolicy.ON_FETCH else None

    def start(self, task: TraversalTask) -> None:
        """Register the root task and schedule it."""
        if self.claim_policy is ClaimPolicy.ON_SPAWN and not task.exhausted:
            self.guard.try_claim(task.resource_id)
        self.tracker.register()
        self._schedule(task)

    def _schedule(self, task: TraversalTask) -> None:
        thread = threading.Thread(
            target=self.execute,
            args=(task,),
            name=f"traversal-{task.resource_id}",
            daemon=True
        )
        try:
            thread.start()
        except RuntimeError as e:
            # The task never ran, so its registration is released here
            logger.error(
                "Failed to start traversal task",
                resource_id=task.resource_id,
                error_message=str(e)
            )
            self.tracker.deregister()

    def execute(self, task: TraversalTask) -> None:
        """Run one task to completion on the current thread."""
        try:
            if task.exhausted:
                logger.debug("Depth exhausted", resource_id=task.resource_id)
                return

            task.start_fetch()
            try:
                result = self.fetcher.fetch(task.resource_id, self._fetch_guard)
            except FetchError as e:
                self._fail(task, e)
                return
            except Exception as e:
                # Fetchers should raise FetchError; anything else is treated
                # as an opaque transport failure of this task only
                logger.exception("Unexpected fetcher error", resource_id=task.resource_id)
                self._fail(task, TransportError(task.resource_id, str(e), {"error_type": type(e).__name__}))
                return

            task.expand()
            self._fetched.increment()
            self._emit_found(TraversalEvent(task.resource_id, task.remaining_depth, body=result.body))

            task.spawn()
            for link in result.links:
                child = task.child(link)
                if (
                    self.claim_policy is ClaimPolicy.ON_SPAWN
                    and not child.exhausted
                    and not self.guard.try_claim(link)
                ):
                    self._duplicates_skipped.increment()
                    continue
                self.tracker.register()
                self._schedule(child)
        finally:
            task.finish()
            self.tracker.deregister()

    def _fail(self, task: TraversalTask, error: FetchError) -> None:
        task.fail_with_error(str(error))
        self._failed.increment()
        if isinstance(error, AlreadyVisitedError):
            self._already_visited.increment()
        logger.debug(
            "Fetch failed",
            resource_id=task.resource_id,
            depth=task.remaining_depth,
            error_type=type(error).__name__
        )
        self._emit_error(TraversalEvent(task.resource_id, task.remaining_depth, error=error))

    def _emit_found(self, event: TraversalEvent) -> None:
        try:
            self.observer.on_found(event)
        except Exception as e:
            logger.error("Observer failed on found event", resource_id=event.resource_id, error_message=str(e))

    def _emit_error(self, event: TraversalEvent) -> None:
        try:
            self.observer.on_error(event)
        except Exception as e:
            logger.error("Observer failed on error event", resource_id=event.resource_id, error_message=str(e))

    def finalize(self) -> TraversalSummary:
        """Fill in the summary from the run counters."""
        self.summary.tasks_registered = self.tracker.registered_count
        self.summary.tasks_finished = self.tracker.deregistered_count
        self.summary.resources_fetched = self._fetched.get_value()
        self.summary.fetch_failures = self._failed.get_value()
        self.summary.already_visited = self._already_visited.get_value()
        self.summary.duplicates_skipped = self._duplicates_skipped.get_value()
        self.summary.completed_at = datetime.now()
        return self.summary


class Traverser:
    """
    Entry point for depth-bounded traversals over one fetcher.

    Every run owns a fresh visited guard. With ``ClaimPolicy.ON_FETCH`` the
    guard is passed to the fetcher with every call and a losing duplicate task
    still calls the fetcher. With ``ClaimPolicy.ON_SPAWN`` the guard is claimed
    before a child is scheduled and duplicates are never started.
    """

    def __init__(
        self,
        fetcher,
        observer: Optional[TraversalObserver] = None,
        claim_policy: ClaimPolicy = ClaimPolicy.ON_FETCH,
        wait_timeout: Optional[float] = None
    ):
        self.fetcher = fetcher
        self.observer = observer or LoggingObserver()
        self.claim_policy = claim_policy
        self.wait_timeout = wait_timeout
        self.last_run: Optional[TraversalRun] = None

    @property
    def last_summary(self) -> Optional[TraversalSummary]:
        return self.last_run.summary if self.last_run else None

    def traverse(self, root: ResourceID, max_depth: int) -> None:
        """
        Traverse from ``root`` up to ``max_depth`` levels and block until done.

        Results are reported to the observer; nothing is returned.

        Raises:
            ValidationError: If max_depth is negative
            TraversalTimeoutError: If wait_timeout is set and expires first
        """
        if max_depth < 0:
            raise ValidationError("max_depth must be non-negative", {"max_depth": max_depth})

        run = TraversalRun(self.fetcher, self.observer, self.claim_policy, root, max_depth)
        self.last_run = run

        logger.info(
            "Traversal started",
            root=root,
            max_depth=max_depth,
            claim_policy=self.claim_policy.value
        )
        run.start(TraversalTask(resource_id=root, remaining_depth=max_depth))

        completed = run.tracker.wait(self.wait_timeout)
        summary = run.finalize()
        if not completed:
            raise TraversalTimeoutError(
                f"traversal from {root} did not finish within {self.wait_timeout}s",
                {"pending": run.tracker.pending, **summary.to_dict()}
            )

        logger.info("Traversal completed", **summary.to_dict())


def traverse(
    root: ResourceID,
    max_depth: int,
    fetcher,
    observer: Optional[TraversalObserver] = None,
    claim_policy: ClaimPolicy = ClaimPolicy.ON_FETCH
) -> None:
    """Run one traversal with a throwaway Traverser."""
    Traverser(fetcher, observer=observer, claim_policy=claim_policy).traverse(root, max_depth)
