"""
Concurrent traversal engine.

This module provides:
- Traversal tasks spawned one thread per discovered link, depth-limited
- A visited guard answering "is this identifier new?" atomically
- A completion tracker the caller blocks on until all tasks have finished
- Observation sinks receiving one event per fetch outcome

Main Components:
- Traverser: Entry point running one traversal and blocking until done
- TraversalRun: Per-run state shared by all tasks
- CompletionTracker: Register/deregister wait-group
- VisitedGuard: Claim-once set of resource identifiers
"""

from .models import (
    ClaimPolicy,
    FetchResult,
    ResourceID,
    TaskState,
    TraversalEvent,
    TraversalSummary,
    TraversalTask
)

from .thread_safe import (
    ThreadSafeCounter,
    ThreadSafeSet,
    VisitedGuard
)

from .completion import CompletionTracker
from .observers import (
    CompositeObserver,
    ConsoleObserver,
    LoggingObserver,
    ResultCollector,
    TraversalObserver
)
from .traversal import Traverser, TraversalRun, traverse

__all__ = [
    # Core models
    'ClaimPolicy',
    'FetchResult',
    'ResourceID',
    'TaskState',
    'TraversalEvent',
    'TraversalSummary',
    'TraversalTask',

    # Thread-safe utilities
    'ThreadSafeCounter',
    'ThreadSafeSet',
    'VisitedGuard',

    # Main components
    'CompletionTracker',
    'Traverser',
    'TraversalRun',
    'traverse',

    # Observers
    'TraversalObserver',
    'ResultCollector',
    'ConsoleObserver',
    'LoggingObserver',
    'CompositeObserver'
]
