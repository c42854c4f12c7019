import logging
from dataclasses import replace
from typing import Iterable, Optional, TextIO
from taskman.domain.task import Task, TaskId, parse_due_date
from taskman.domain.errors import InvalidInputError, TaskNotFoundError, ParseBoolError
from taskman.domain.update_fields import UpdateFields
from taskman.domain.filters import DueFilter, CompletionFilter, filter_tasks
from taskman.domain.stats import Stats
from taskman.ports.clock import Clock
from taskman.adapters.system.clock_system import SystemClock


### COMMENTS
# ==========================================================
# CRUD engine (services/task_store.py).
# ==========================================================
# Role:
# - Owns the ordered list of tasks and the next-id counter.
# - add / delete / update / complete / show / list / stats.
#
# Rules:
# - Insertion order is the listing order.
# - Ids come only from `next_id`, which only grows: a deleted id is never
#   handed out again.
# - Tasks are frozen; a change is a new instance swapped in at the same index.
# - Persistence is not done here; the caller saves the whole store after
#   each mutation (see ports/task_repository.py).

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory task collection plus id allocator.

    :param tasks: Initial tasks, in order (e.g. loaded from a repository).
    :param next_id: Next id to hand out. Defaults to max(existing id) + 1.
    :param clock: Time source for the due filters (UTC).
    """
    def __init__(
        self,
        tasks: Iterable[Task] = (),
        next_id: Optional[int] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._tasks: list[Task] = list(tasks)
        highest = max((t.id for t in self._tasks), default=0)
        self._next_id = max(next_id or 0, highest + 1)
        self.clock = clock or SystemClock()

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task], clock: Optional[Clock] = None) -> "TaskStore":
        """Builds a store from persisted tasks; next id is max(id) + 1, not the task count."""
        return cls(tasks, clock=clock)

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._tasks)

    def add(self, name: str, description: str, due_date: str) -> TaskId:
        """
            Creates a task with the next id and appends it.

            - `name` must not be blank (`InvalidInputError("name", ...)`).
            - `due_date` is parsed before the id is allocated, so a bad date
              neither adds a task nor burns an id.

            :raises InvalidDueDateFormatError: When `due_date` cannot be parsed.
            :return: Id of the new task.
        """
        if not name or not name.strip():
            raise InvalidInputError("name", "name must not be empty")

        task = Task.create(TaskId(self._next_id), name, description, due_date)
        self._next_id += 1
        self._tasks.append(task)
        logger.info("added task %s (%s)", task.id, task.name)
        return task.id

    def delete(self, task_id: TaskId) -> bool:
        """Removes the task with `task_id`. Returns False (and changes nothing) if absent."""
        found = self.find(task_id)
        if found is None:
            logger.debug("delete: task %s not found", task_id)
            return False
        index, _ = found
        del self._tasks[index]
        logger.info("deleted task %s", task_id)
        return True

    def find(self, task_id: TaskId) -> Optional[tuple[int, Task]]:
        """Linear scan; returns (position, task) of the first match or None."""
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index, task
        return None

    def get(self, task_id: TaskId) -> Task:
        found = self.find(task_id)
        if found is None:
            raise TaskNotFoundError(task_id)
        return found[1]

    def list_tasks(
        self,
        due: Optional[DueFilter] = None,
        completion: Optional[CompletionFilter] = None,
    ) -> list[Task]:
        """
            Returns tasks in insertion order.

            Without filters returns everything; otherwise the due filter runs
            first and the completion filter runs on its result.
        """
        if due is None and completion is None:
            return list(self._tasks)
        return filter_tasks(self._tasks, self.clock.now(), due, completion)

    def update(self, task_id: TaskId, patch: UpdateFields) -> Task:
        """
            Applies a sparse patch to an existing task.

            - Missing id -> `TaskNotFoundError`.
            - `name` must not be blank (`InvalidInputError("name", ...)`).
            - `name` / `description` overwrite directly.
            - `due_date` is re-parsed (`InvalidDueDateFormatError` on failure).
            - `completed` must be exactly "true" or "false" (`ParseBoolError`).
            - Unset fields keep their value; the id never changes.
            - All-or-nothing: the stored task is replaced only after every
              field validated.

            :return: The updated `Task`.
        """
        found = self.find(task_id)
        if found is None:
            raise TaskNotFoundError(task_id)
        index, task = found

        if patch.is_empty():
            return task
        if patch.name is not None and not patch.name.strip():
            raise InvalidInputError("name", "name must not be empty")

        changes: dict = {}
        if patch.name is not None:
            changes["name"] = patch.name
        if patch.description is not None:
            changes["description"] = patch.description
        if patch.due_date is not None:
            changes["due_date"] = parse_due_date(patch.due_date)
        if patch.completed is not None:
            changes["completed"] = _parse_bool(patch.completed)

        updated = replace(task, **changes)
        self._tasks[index] = updated
        logger.info("updated task %s: %s", task_id, sorted(changes))
        return updated

    def complete(self, task_id: TaskId) -> Task:
        """Marks the task as completed. Idempotent. Missing id -> `TaskNotFoundError`."""
        found = self.find(task_id)
        if found is None:
            raise TaskNotFoundError(task_id)
        index, task = found
        if task.completed:
            return task
        done = replace(task, completed=True)
        self._tasks[index] = done
        logger.info("completed task %s", task_id)
        return done

    def show(self, task_id: TaskId, sink: TextIO) -> None:
        """Writes the task's display line to `sink`. Missing id -> `TaskNotFoundError`."""
        task = self.get(task_id)
        sink.write(f"{task}\n")

    def stats(self) -> Stats:
        return Stats.compute(self._tasks)


def _parse_bool(value: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    raise ParseBoolError(value)
