from typing import NewType
from datetime import datetime
from dataclasses import dataclass
from taskman.domain.errors import InvalidDueDateFormatError

TaskId = NewType("TaskId", int)


def parse_due_date(value: str) -> datetime:
    """Parses an ISO-8601 timestamp that carries an explicit UTC offset.

    A trailing 'Z' is accepted as +00:00. Naive timestamps are rejected.

    :raises InvalidDueDateFormatError: When the string cannot be parsed.
    """
    if not isinstance(value, str):
        raise InvalidDueDateFormatError(str(value))
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidDueDateFormatError(value) from None
    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise InvalidDueDateFormatError(value)
    return parsed


@dataclass(frozen=True)
class Task():
    """
    Domain model of a single task; immutable. `id` is handed out by the store,
    a "change" is a new instance built with `dataclasses.replace`.
    """
    id: TaskId
    name: str
    description: str
    due_date: datetime
    completed: bool = False

    @classmethod
    def create(cls, task_id: TaskId, name: str, description: str, due_date: str) -> "Task":
        """
            Builds a new, not yet completed task.

            :param task_id: Identifier allocated by the caller (the store).
            :param due_date: ISO-8601 string with UTC offset.
            :raises InvalidDueDateFormatError: When `due_date` cannot be parsed.
            :return: New `Task` with `completed=False`.
        """
        return cls(
            id=task_id,
            name=name,
            description=description,
            due_date=parse_due_date(due_date),
        )

    def __str__(self) -> str:
        return f"{self.id} - {self.name} - {self.description} - {self.due_date.isoformat()}"
