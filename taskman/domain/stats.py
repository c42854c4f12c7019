import math
from dataclasses import dataclass
from typing import Iterable
from taskman.domain.task import Task


@dataclass(frozen=True)
class Stats:
    """Read-only snapshot of how far along a task collection is."""
    total: int
    completed: int
    percent_completed: int

    @classmethod
    def compute(cls, tasks: Iterable[Task]) -> "Stats":
        """
            Counts tasks and completed tasks; percent is floor(100 * completed / total),
            0 for an empty collection.
        """
        items = list(tasks)
        total = len(items)
        completed = sum(1 for t in items if t.completed)
        percent = 0 if total == 0 else math.floor(100 * completed / total)
        return cls(total=total, completed=completed, percent_completed=percent)
