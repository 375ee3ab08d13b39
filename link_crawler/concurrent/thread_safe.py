"""
Thread-safe data structures for the concurrent traversal engine.
"""

import threading
from typing import Any, Optional, Set


class ThreadSafeCounter:
    """Thread-safe counter with atomic operations."""

    def __init__(self, initial_value: int = 0):
        """
        Initialize counter with initial value.

        Args:
            initial_value: Starting value for the counter
        """
        self._value = initial_value
        self._lock = threading.Lock()

    def increment(self, amount: int = 1) -> int:
        """
        Atomically increment counter and return new value.

        Args:
            amount: Amount to increment by (default: 1)

        Returns:
            New counter value after increment
        """
        with self._lock:
            self._value += amount
            return self._value

    def decrement(self, amount: int = 1) -> int:
        """
        Atomically decrement counter and return new value.

        Args:
            amount: Amount to decrement by (default: 1)

        Returns:
            New counter value after decrement
        """
        with self._lock:
            self._value -= amount
            return self._value

    def get_value(self) -> int:
        """Get current counter value."""
        with self._lock:
            return self._value

    def __repr__(self) -> str:
        return f"ThreadSafeCounter(value={self.get_value()})"


class ThreadSafeSet:
    """Thread-safe set implementation."""

    def __init__(self, initial_items: Optional[Set[Any]] = None):
        """
        Initialize thread-safe set.

        Args:
            initial_items: Optional initial items for the set
        """
        self._set: Set[Any] = set(initial_items) if initial_items else set()
        self._lock = threading.Lock()

    def add(self, item: Any) -> bool:
        """
        Add item to set.

        The membership test and the insertion happen under one lock
        acquisition, so concurrent callers adding the same item see exactly
        one True.

        Args:
            item: Item to add

        Returns:
            True if item was added (wasn't already present)
        """
        with self._lock:
            if item not in self._set:
                self._set.add(item)
                return True
            return False

    def contains(self, item: Any) -> bool:
        """
        Check if item is in set.

        Args:
            item: Item to check

        Returns:
            True if item is in set
        """
        with self._lock:
            return item in self._set

    def __contains__(self, item: Any) -> bool:
        """Support 'in' operator."""
        return self.contains(item)

    def size(self) -> int:
        """Get set size."""
        with self._lock:
            return len(self._set)

    def __len__(self) -> int:
        return self.size()

    def __repr__(self) -> str:
        return f"ThreadSafeSet(size={self.size()})"


class VisitedGuard:
    """
    Set of resource identifiers claimed during one traversal run.

    A claim is permanent for the lifetime of the guard; there is no removal.
    """

    def __init__(self):
        self._claimed = ThreadSafeSet()
        self._rejected = ThreadSafeCounter()

    def try_claim(self, resource_id: str) -> bool:
        """
        Atomically claim a resource identifier.

        Args:
            resource_id: Identifier to claim

        Returns:
            True if the identifier was newly claimed, False if another caller
            already holds it
        """
        if self._claimed.add(resource_id):
            return True
        self._rejected.increment()
        return False

    def is_claimed(self, resource_id: str) -> bool:
        """Membership check; only try_claim decides who owns an identifier."""
        return resource_id in self._claimed

    @property
    def rejected_claims(self) -> int:
        """Number of try_claim calls that lost to an earlier claim."""
        return self._rejected.get_value()

    def __len__(self) -> int:
        return len(self._claimed)

    def __repr__(self) -> str:
        return f"VisitedGuard(claimed={len(self)}, rejected={self.rejected_claims})"
