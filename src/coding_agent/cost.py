# cost.py
# Running total of generation spend for the whole process.
#
# One instance is created by the entry point and passed to every component
# that can incur cost. It is never a module-level singleton.

import threading

from coding_agent.models import UsageRecord


class CostTracker:
    """Thread-safe, add-only spend accumulator."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = 0.0
        self._calls = 0

    def add(self, cost: float) -> None:
        if cost < 0:
            raise ValueError(f"Cost cannot be negative: {cost}")
        with self._lock:
            self._total += cost
            self._calls += 1

    def record(self, usage: UsageRecord) -> UsageRecord:
        """Fold a generation result into the total and hand it back."""
        self.add(usage.cost)
        return usage

    @property
    def total(self) -> float:
        with self._lock:
            return self._total

    @property
    def calls(self) -> int:
        with self._lock:
            return self._calls
