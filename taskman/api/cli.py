from taskman.domain.errors import (
    InvalidInputError,
    NoFileError,
    StorageError,
    TaskNotFoundError,
)
from taskman.domain.task import TaskId
from taskman.domain.filters import DueFilter, CompletionFilter
from taskman.domain.update_fields import parse_update_fields
from taskman.services.task_store import TaskStore
from taskman.adapters.yamlfile.task_repo import YamlTaskRepository
from taskman.ports.task_repository import TaskRepository
from taskman.config import Settings
from taskman.logging_setup import setup_logging
from typer import Argument, Exit, Option, Typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape
from pathlib import Path
from typing import Optional
import logging


### COMMENTS
# ==========================================================
# CLI (Typer + Rich) - user interface for the task manager.
# ==========================================================
# Role:
# - Maps commands onto TaskStore (add/list/delete/update/show/complete/stats).
# - Load once in the callback, save the whole store after every mutation.
# - Catches DomainError and prints friendly panels.
#
# Rules:
# - No business logic here, delegate to TaskStore.
# - A failed save is reported, the in-memory change is not rolled back.

logger = logging.getLogger(__name__)

app = Typer(help="Task manager CLI")
console = Console()

store: TaskStore | None = None  # set in the callback
repo: TaskRepository | None = None


def open_store(repository: TaskRepository) -> TaskStore:
    """Loads the store from `repository`; no file yet -> empty store."""
    try:
        return TaskStore.from_tasks(repository.load())
    except NoFileError as e:
        logger.info("%s Starting with an empty store.", e)
        return TaskStore()


@app.callback()
def main(
    file: Optional[Path] = Option(
        None,
        "--file",
        "-f",
        help="Path to the YAML tasks file (overrides TASKMAN_TASKS_FILE)",
    )
) -> None:
    """Bootstrap: settings, logging, repository and store."""
    global store, repo
    try:
        settings = Settings.from_env()
    except StorageError as e:
        error_panel(e, "Configuration error")
        raise Exit(code=1)

    setup_logging(log_dir=settings.log_dir, console_level=settings.console_level)
    repo = YamlTaskRepository(file or settings.tasks_file)

    try:
        store = open_store(repo)
    except StorageError as e:
        logger.error("failed to load tasks: %s", e)
        error_panel(e, "Failed to load tasks")
        raise Exit(code=1)


def error_panel(e: Exception, title: str, hint: str | None = None) -> None:
    body = f"❌ {escape(str(e))}" + (f"\n[dim]{hint}[/]" if hint else "")
    console.print(Panel.fit(body, title=title, border_style="red"))


def not_found_panel(e: TaskNotFoundError) -> None:
    error_panel(e, "Not found", "Use 'taskman list' to find a valid ID")


def save() -> None:
    """Flushes the whole store. Failure is shown, the mutation stays in memory."""
    try:
        repo.save(store.tasks)
    except StorageError as e:
        logger.error("failed to save tasks: %s", e)
        error_panel(e, "Failed to save tasks")


def print_line(line: str) -> None:
    console.print(line, markup=False, highlight=False, soft_wrap=True)


@app.command("add")
def add(
    name: str,
    description: str,
    due_date: str = Argument(..., help="ISO-8601 with offset, e.g. 2030-01-01T12:00:00+00:00"),
) -> None:
    """
    Adds a new task.

    Flow:
    - store.add(name, description, due_date), then save.
    - Success: green panel with the new ID.
    - Bad date / empty name: red panel.
    """
    try:
        task_id = store.add(name, description, due_date)
    except InvalidInputError as e:
        error_panel(e, "Validation error", "Example: taskman add 'Name' 'Desc' 2030-01-01T12:00:00+00:00")
        return
    save()
    console.print(Panel.fit(
        f"✅ Task added\n[cyan]ID:[/cyan] {task_id}\n[dim]Name:[/dim] {escape(name)}",
        title="Success",
        border_style="green",
    ))


@app.command("list")
def list_cmd(
    due: Optional[str] = Option(None, "--due", "-d", help="today | week | past | all"),
    status: Optional[str] = Option(None, "--status", "-s", help="all | complete | incomplete"),
) -> None:
    """Lists tasks, optionally filtered by due bucket and completion status."""
    try:
        due_filter = DueFilter.parse(due) if due is not None else None
        completion_filter = CompletionFilter.parse(status) if status is not None else None
    except InvalidInputError as e:
        error_panel(e, "Validation error")
        return

    tasks = store.list_tasks(due_filter, completion_filter)
    if not tasks:
        console.print("[dim]No tasks.[/dim]")
        return
    for task in tasks:
        print_line(str(task))


@app.command("delete")
def delete(task_id: int) -> None:
    """Deletes a task."""
    if not store.delete(TaskId(task_id)):
        not_found_panel(TaskNotFoundError(task_id))
        return
    save()
    console.print(Panel.fit(
        f"🟡 Task deleted\nID: {task_id}",
        title="Deleted",
        border_style="yellow",
    ))


@app.command("update")
def update(
    task_id: int,
    fields: str = Argument(..., help="e.g. 'name:New name, completed:true'"),
) -> None:
    """
    Updates fields of a task.

    Flow:
    - parse_update_fields(fields) -> store.update(id, patch), then save.
    - Unknown ID: red "Not found" panel.
    - Malformed patch: red panel naming the bad key/value.
    """
    try:
        task = store.update(TaskId(task_id), parse_update_fields(fields))
    except TaskNotFoundError as e:
        not_found_panel(e)
        return
    except InvalidInputError as e:
        error_panel(e, "Validation error", "Format: key:value, key:value")
        return
    save()
    console.print(Panel.fit(
        f"✅ Task updated\n[cyan]ID:[/cyan] {task.id}",
        title="Success",
        border_style="green",
    ))
    print_line(str(task))


@app.command("show")
def show(task_id: int) -> None:
    """Shows a single task."""
    try:
        store.show(TaskId(task_id), console.file)
    except TaskNotFoundError as e:
        not_found_panel(e)


@app.command("complete")
def complete(task_id: int) -> None:
    """Marks a task as completed."""
    try:
        task = store.complete(TaskId(task_id))
    except TaskNotFoundError as e:
        not_found_panel(e)
        return
    save()
    console.print(Panel.fit(
        f"✅ Completed! ID: {task.id}\n[dim]Name:[/dim] {escape(task.name)}",
        title="Success",
        border_style="green",
    ))


@app.command("stats")
def stats() -> None:
    """Shows total / completed / percent completed."""
    s = store.stats()
    table = Table(header_style="bold")
    table.add_column("Total", justify="right")
    table.add_column("Completed", justify="right", style="green")
    table.add_column("Percent", justify="right", style="cyan")
    table.add_row(str(s.total), str(s.completed), f"{s.percent_completed}%")
    console.print(table)


if __name__ == "__main__":
    app()
