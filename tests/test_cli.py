import pytest
import yaml
from typer.testing import CliRunner
from taskman.api.cli import app


runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Logs and config go to a temporary directory for every test."""
    monkeypatch.setenv("TASKMAN_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("TASKMAN_CONFIG", raising=False)
    monkeypatch.delenv("TASKMAN_TASKS_FILE", raising=False)
    monkeypatch.delenv("TASKMAN_LOG_LEVEL", raising=False)


@pytest.fixture
def tasks_file(tmp_path):
    return tmp_path / "data" / "tasks.yaml"


def run(tasks_file, *args):
    return runner.invoke(app, ["--file", str(tasks_file), *args])


def test_add_creates_file_and_prints_id(tasks_file):
    result = run(tasks_file, "add", "Buy milk", "2% lactose-free", "2030-01-01T12:00:00+00:00")

    assert result.exit_code == 0
    assert "Task added" in result.output
    document = yaml.safe_load(tasks_file.read_text(encoding="utf-8"))
    assert document["tasks"][0]["name"] == "Buy milk"
    assert document["tasks"][0]["completed"] is False


def test_add_bad_date_is_reported_and_not_saved(tasks_file):
    result = run(tasks_file, "add", "Buy milk", "", "tomorrow")

    assert result.exit_code == 0
    assert "Validation error" in result.output
    assert not tasks_file.exists()


def test_state_survives_between_invocations(tasks_file):
    run(tasks_file, "add", "Task 1", "Text for task1", "2030-01-01T12:00:00+00:00")
    run(tasks_file, "add", "Task 2", "Text for task2", "2030-01-02T12:00:00+00:00")

    result = run(tasks_file, "list")

    assert result.exit_code == 0
    assert "1 - Task 1 - Text for task1 - 2030-01-01T12:00:00+00:00" in result.output
    assert "2 - Task 2 - Text for task2 - 2030-01-02T12:00:00+00:00" in result.output


def test_show(tasks_file):
    run(tasks_file, "add", "Task 1", "Text for task1", "2030-01-01T12:00:00+00:00")

    result = run(tasks_file, "show", "1")

    assert result.exit_code == 0
    assert "1 - Task 1 - Text for task1 - 2030-01-01T12:00:00+00:00" in result.output


def test_show_missing(tasks_file):
    result = run(tasks_file, "show", "42")

    assert result.exit_code == 0
    assert "Not found" in result.output


def test_update_and_complete(tasks_file):
    run(tasks_file, "add", "Task 1", "Text for task1", "2030-01-01T12:00:00+00:00")

    result = run(tasks_file, "update", "1", "name:New Name, description:Update desc")
    assert result.exit_code == 0
    assert "1 - New Name - Update desc - 2030-01-01T12:00:00+00:00" in result.output

    result = run(tasks_file, "complete", "1")
    assert result.exit_code == 0

    result = run(tasks_file, "list", "--status", "complete")
    assert "1 - New Name" in result.output


def test_update_invalid_patch_is_reported(tasks_file):
    run(tasks_file, "add", "Task 1", "", "2030-01-01T12:00:00+00:00")

    result = run(tasks_file, "update", "1", "completed:maybe")

    assert result.exit_code == 0
    assert "Validation error" in result.output
    document = yaml.safe_load(tasks_file.read_text(encoding="utf-8"))
    assert document["tasks"][0]["completed"] is False


def test_update_missing_task(tasks_file):
    result = run(tasks_file, "update", "7", "name:x")
    assert "Not found" in result.output


def test_delete_keeps_ids_unique_across_runs(tasks_file):
    run(tasks_file, "add", "A", "", "2030-01-01T12:00:00+00:00")
    run(tasks_file, "add", "B", "", "2030-01-01T12:00:00+00:00")
    run(tasks_file, "delete", "1")

    run(tasks_file, "add", "C", "", "2030-01-01T12:00:00+00:00")

    document = yaml.safe_load(tasks_file.read_text(encoding="utf-8"))
    assert [t["id"] for t in document["tasks"]] == [2, 3]


def test_delete_missing(tasks_file):
    result = run(tasks_file, "delete", "3")
    assert "Not found" in result.output


def test_list_filters(tasks_file):
    run(tasks_file, "add", "Old", "", "2000-01-01T00:00:00+00:00")
    run(tasks_file, "add", "Future", "", "2999-01-01T00:00:00+00:00")

    result = run(tasks_file, "list", "--due", "past")

    assert "1 - Old" in result.output
    assert "Future" not in result.output


def test_list_unknown_filter_token(tasks_file):
    result = run(tasks_file, "list", "--due", "someday")

    assert result.exit_code == 0
    assert "Validation error" in result.output


def test_list_empty(tasks_file):
    result = run(tasks_file, "list")
    assert "No tasks." in result.output


def test_stats(tasks_file):
    for name in ("A", "B", "C"):
        run(tasks_file, "add", name, "", "2030-01-01T12:00:00+00:00")
    run(tasks_file, "complete", "1")
    run(tasks_file, "complete", "2")

    result = run(tasks_file, "stats")

    assert result.exit_code == 0
    assert "66%" in result.output


def test_corrupt_file_aborts(tasks_file):
    tasks_file.parent.mkdir(parents=True)
    tasks_file.write_text("tasks: [unclosed", encoding="utf-8")

    result = run(tasks_file, "list")

    assert result.exit_code == 1
    assert "Failed to load tasks" in result.output
    assert tasks_file.read_text(encoding="utf-8") == "tasks: [unclosed"


def test_save_failure_is_reported(tmp_path):
    target = tmp_path / "tasks.yaml"
    target.mkdir()

    result = runner.invoke(app, ["--file", str(target), "add", "A", "", "2030-01-01T12:00:00+00:00"])

    assert result.exit_code == 0
    assert "Failed to save tasks" in result.output
    assert "Task added" in result.output


def test_tasks_file_from_environment(tmp_path, monkeypatch):
    target = tmp_path / "env" / "tasks.yaml"
    monkeypatch.setenv("TASKMAN_TASKS_FILE", str(target))

    result = runner.invoke(app, ["add", "A", "", "2030-01-01T12:00:00+00:00"])

    assert result.exit_code == 0
    assert target.exists()


def test_non_utf8_file_aborts(tasks_file):
    tasks_file.parent.mkdir(parents=True)
    tasks_file.write_bytes(b"tasks:\n- name: \xff\xfe\n")

    result = run(tasks_file, "list")

    assert result.exit_code == 1
    assert "Failed to load tasks" in result.output
    assert tasks_file.read_bytes() == b"tasks:\n- name: \xff\xfe\n"


def test_file_without_tasks_key_is_not_overwritten(tasks_file):
    tasks_file.parent.mkdir(parents=True)
    tasks_file.write_text("foo: 1\n", encoding="utf-8")

    result = run(tasks_file, "add", "A", "", "2030-01-01T12:00:00+00:00")

    assert result.exit_code == 1
    assert tasks_file.read_text(encoding="utf-8") == "foo: 1\n"


def test_update_blank_name_is_reported(tasks_file):
    run(tasks_file, "add", "Task 1", "", "2030-01-01T12:00:00+00:00")

    result = run(tasks_file, "update", "1", "name:")

    assert "Validation error" in result.output
    document = yaml.safe_load(tasks_file.read_text(encoding="utf-8"))
    assert document["tasks"][0]["name"] == "Task 1"
