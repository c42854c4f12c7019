from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, Optional
from taskman.domain.errors import InvalidInputError
from taskman.domain.task import Task


### COMMENTS
# Both filters are pure: they take a sequence of tasks and return a NEW list
# with the matching tasks in their original relative order. The store is
# never touched. "now" is passed in by the caller (store clock) and is
# compared in UTC.

WEEK = timedelta(days=7)


class DueFilter(str, Enum):
    PAST_DUE = "past"
    DUE_TODAY = "today"
    DUE_THIS_WEEK = "week"
    ALL = "all"

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, token: str) -> "DueFilter":
        """Maps a command-line token ("today", "week", "past", "all") to a filter."""
        try:
            return cls(token)
        except ValueError:
            raise InvalidInputError("due", f"unknown due filter {token!r}") from None

    def matches(self, task: Task, now: datetime) -> bool:
        due = task.due_date
        match self:
            case DueFilter.PAST_DUE:
                return due < now
            case DueFilter.DUE_TODAY:
                return _utc(due).date() == _utc(now).date()
            case DueFilter.DUE_THIS_WEEK:
                return now <= due <= now + WEEK
            case _:
                return True

    def apply(self, tasks: Iterable[Task], now: datetime) -> list[Task]:
        if self is DueFilter.ALL:
            return list(tasks)
        return [t for t in tasks if self.matches(t, now)]


class CompletionFilter(str, Enum):
    ALL = "all"
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, token: str) -> "CompletionFilter":
        """Maps a command-line token ("all", "complete", "incomplete") to a filter."""
        try:
            return cls(token)
        except ValueError:
            raise InvalidInputError("status", f"unknown status filter {token!r}") from None

    def matches(self, task: Task) -> bool:
        match self:
            case CompletionFilter.COMPLETE:
                return task.completed
            case CompletionFilter.INCOMPLETE:
                return not task.completed
            case _:
                return True

    def apply(self, tasks: Iterable[Task]) -> list[Task]:
        if self is CompletionFilter.ALL:
            return list(tasks)
        return [t for t in tasks if self.matches(t)]


def filter_tasks(
    tasks: Iterable[Task],
    now: datetime,
    due: Optional[DueFilter] = None,
    completion: Optional[CompletionFilter] = None,
) -> list[Task]:
    """Due filter first, then the completion filter on its result. Missing filter = ALL."""
    filtered = (due or DueFilter.ALL).apply(tasks, now)
    return (completion or CompletionFilter.ALL).apply(filtered)


def _utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)
