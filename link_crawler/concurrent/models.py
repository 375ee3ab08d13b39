"""
Data models for the concurrent traversal engine.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime
from enum import Enum

from link_crawler.utils.errors import ValidationError


ResourceID = str


class TaskState(Enum):
    """Traversal task lifecycle state."""
    CREATED = "created"
    FETCHING = "fetching"
    EXPANDING = "expanding"
    SPAWNING = "spawning"
    FAILED = "failed"
    FINISHED = "finished"


class ClaimPolicy(Enum):
    """Where the visited guard is consulted."""
    # The fetcher claims the identifier when asked for it
    ON_FETCH = "on_fetch"
    # The parent claims the identifier before scheduling the child
    ON_SPAWN = "on_spawn"


@dataclass
class FetchResult:
    """Content and outbound links of one fetched resource."""
    body: str
    links: List[ResourceID] = field(default_factory=list)


@dataclass
class TraversalTask:
    """One unit of traversal work: fetch one resource at one remaining depth."""
    resource_id: ResourceID
    remaining_depth: int
    parent_id: Optional[ResourceID] = None
    state: TaskState = TaskState.CREATED
    error_message: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        if self.remaining_depth < 0:
            raise ValidationError(
                "remaining_depth must be non-negative",
                {"resource_id": self.resource_id, "remaining_depth": self.remaining_depth}
            )

    @property
    def exhausted(self) -> bool:
        """True when the task has no depth left and must not fetch."""
        return self.remaining_depth == 0

    def start_fetch(self) -> None:
        self.started_at = datetime.now()
        self.state = TaskState.FETCHING

    def expand(self) -> None:
        self.state = TaskState.EXPANDING

    def spawn(self) -> None:
        self.state = TaskState.SPAWNING

    def fail_with_error(self, error_message: str) -> None:
        """Mark task as failed with error message."""
        self.state = TaskState.FAILED
        self.error_message = error_message

    def finish(self) -> None:
        self.completed_at = datetime.now()
        self.state = TaskState.FINISHED

    def child(self, resource_id: ResourceID) -> "TraversalTask":
        """Create the task for a link discovered by this one."""
        return TraversalTask(
            resource_id=resource_id,
            remaining_depth=self.remaining_depth - 1,
            parent_id=self.resource_id
        )


@dataclass
class TraversalEvent:
    """Observation emitted for every fetch outcome."""
    resource_id: ResourceID
    depth: int
    body: Optional[str] = None
    error: Optional[Exception] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class TraversalSummary:
    """Totals of a single traversal run."""
    root: ResourceID
    max_depth: int
    claim_policy: ClaimPolicy
    tasks_registered: int = 0
    tasks_finished: int = 0
    resources_fetched: int = 0
    fetch_failures: int = 0
    already_visited: int = 0
    duplicates_skipped: int = 0
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def execution_time(self) -> float:
        if self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root,
            "max_depth": self.max_depth,
            "claim_policy": self.claim_policy.value,
            "tasks_registered": self.tasks_registered,
            "tasks_finished": self.tasks_finished,
            "resources_fetched": self.resources_fetched,
            "fetch_failures": self.fetch_failures,
            "already_visited": self.already_visited,
            "duplicates_skipped": self.duplicates_skipped,
            "execution_time": round(self.execution_time, 3),
        }
