from typing import Iterable, Protocol
from taskman.domain.task import Task


### COMMENTS
# ==========================================================
# Task persistence contract (ports/task_repository.py).
# ==========================================================
# - The whole store is the unit of persistence: load everything once at
#   startup, save everything after each mutation. No partial writes.
# - Adapters map technical errors to domain errors:
#     * nothing to read          -> NoFileError (caller starts empty)
#     * I/O / bad document       -> StorageError
# - Order of tasks is preserved in both directions.


class TaskRepository(Protocol):
    """Interface for loading and saving the full task collection."""

    def load(self) -> list[Task]:
        """Returns every stored task in stored order.

        Raises:
            NoFileError: When there is nothing to load (fresh run).
            StorageError: When the stored document is unreadable or malformed.
        """

    def save(self, tasks: Iterable[Task]) -> None:
        """Replaces the stored collection with `tasks`.

        Raises:
            StorageError: On any I/O or serialization failure.
        """
