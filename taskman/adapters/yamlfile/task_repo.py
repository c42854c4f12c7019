from taskman.ports.task_repository import TaskRepository
from taskman.domain.task import Task, TaskId, parse_due_date
from taskman.domain.errors import NoFileError, StorageError, InvalidInputError
from pathlib import Path
from typing import Iterable
import logging
import os
import yaml


### COMMENTS
# ==========================================================
# YAML file adapter (adapters/yamlfile/task_repo.py).
# ==========================================================
# Document shape:
#
#   tasks:
#   - id: 1
#     name: Buy milk
#     description: 2% lactose-free
#     due_date: '2030-01-01T12:00:00+00:00'
#     completed: false
#
# - save() always rewrites the whole document (tmp file + os.replace).
# - No file locking. Two processes saving at the same time race and the
#   last writer wins; acceptable for a single-user tool.

logger = logging.getLogger(__name__)

TASK_FIELDS = ("id", "name", "description", "due_date", "completed")


def _encode_task(task: Task) -> dict:
    return {
        "id": int(task.id),
        "name": task.name,
        "description": task.description,
        "due_date": task.due_date.isoformat(),
        "completed": bool(task.completed),
    }


def _decode_task(row: dict) -> Task:
    if not isinstance(row, dict):
        raise ValueError(f"task record must be a mapping, got {type(row).__name__}")
    missing = [k for k in TASK_FIELDS if k not in row]
    if missing:
        raise ValueError(f"task record missing {', '.join(missing)}")

    task_id = row["id"]
    if isinstance(task_id, bool) or not isinstance(task_id, int) or task_id < 1:
        raise ValueError(f"id must be a positive integer, got {task_id!r}")
    if not isinstance(row["completed"], bool):
        raise ValueError(f"completed must be a boolean, got {row['completed']!r}")

    return Task(
        id=TaskId(task_id),
        name=str(row["name"]),
        description="" if row["description"] is None else str(row["description"]),
        due_date=parse_due_date(str(row["due_date"])),
        completed=row["completed"],
    )


class YamlTaskRepository(TaskRepository):
    def __init__(self, path: Path) -> None:
        """Repository backed by a single YAML document at `path`."""
        self.path = Path(path)

    def load(self) -> list[Task]:
        """Reads every task from the file, in stored order.
        Raises NoFileError if the file is missing or cannot be read,
        StorageError if the document is malformed."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.debug("cannot read %s: %s", self.path, e)
            raise NoFileError(self.path) from e
        except UnicodeDecodeError as e:
            raise StorageError(f"{self.path.name}: not valid UTF-8: {e}") from e

        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise StorageError(f"{self.path.name}: invalid YAML: {e}") from e

        if document is None:
            return []
        if not isinstance(document, dict) or "tasks" not in document:
            raise StorageError(f"{self.path.name}: expected a mapping with a 'tasks' list")
        if document["tasks"] is not None and not isinstance(document["tasks"], list):
            raise StorageError(f"{self.path.name}: expected a mapping with a 'tasks' list")

        tasks: list[Task] = []
        seen: set[int] = set()
        for position, row in enumerate(document.get("tasks") or [], start=1):
            try:
                task = _decode_task(row)
            except (ValueError, InvalidInputError) as e:
                raise StorageError(f"{self.path.name}: task #{position}: {e}") from e
            if task.id in seen:
                raise StorageError(f"{self.path.name}: task #{position}: duplicate id {task.id}")
            seen.add(task.id)
            tasks.append(task)

        logger.debug("loaded %d tasks from %s", len(tasks), self.path)
        return tasks

    def save(self, tasks: Iterable[Task]) -> None:
        """Writes the full collection, replacing the previous file."""
        document = {"tasks": [_encode_task(t) for t in tasks]}
        tmp = self.path.with_suffix(self.path.suffix + ".swap")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8", newline="\n") as f:
                yaml.safe_dump(document, f, sort_keys=False, allow_unicode=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except (OSError, yaml.YAMLError) as e:
            try:
                if tmp.exists():
                    tmp.unlink()
            except OSError:
                logger.warning("could not remove temporary file %s", tmp)
            raise StorageError(f"cannot save tasks to {self.path}: {e}") from e
        logger.debug("saved %d tasks to %s", len(document["tasks"]), self.path)
