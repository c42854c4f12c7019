import pytest
from datetime import datetime, timezone, timedelta
from taskman.domain.filters import DueFilter, CompletionFilter, filter_tasks
from taskman.domain.task import Task, TaskId
from taskman.domain.errors import InvalidInputError

NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_task(task_id: int, due: datetime, completed: bool = False) -> Task:
    return Task(
        id=TaskId(task_id),
        name=f"Task {task_id}",
        description="Description",
        due_date=due,
        completed=completed,
    )


@pytest.fixture
def tasks():
    return [
        make_task(1, NOW - timedelta(days=3)),
        make_task(2, NOW - timedelta(days=2)),
        make_task(3, NOW + timedelta(hours=2)),
        make_task(4, NOW + timedelta(days=1)),
        make_task(5, NOW + timedelta(days=2)),
    ]


def ids(items):
    return [t.id for t in items]


def test_past_due(tasks):
    assert ids(DueFilter.PAST_DUE.apply(tasks, NOW)) == [1, 2]


def test_due_this_week(tasks):
    assert ids(DueFilter.DUE_THIS_WEEK.apply(tasks, NOW)) == [3, 4, 5]


def test_all_keeps_order(tasks):
    assert DueFilter.ALL.apply(tasks, NOW) == tasks


def test_due_today_uses_utc_calendar_day():
    items = [
        make_task(1, datetime(2025, 1, 15, 0, 0, tzinfo=timezone.utc)),
        make_task(2, datetime(2025, 1, 15, 23, 59, 59, tzinfo=timezone.utc)),
        make_task(3, datetime(2025, 1, 16, 0, 30, tzinfo=timezone.utc)),
        # 01:30 on the 16th at +02:00 is 23:30 on the 15th in UTC
        make_task(4, datetime(2025, 1, 16, 1, 30, tzinfo=timezone(timedelta(hours=2)))),
        make_task(5, datetime(2025, 1, 14, 23, 59, tzinfo=timezone.utc)),
    ]
    assert ids(DueFilter.DUE_TODAY.apply(items, NOW)) == [1, 2, 4]


def test_due_this_week_bounds_are_inclusive():
    items = [
        make_task(1, NOW),
        make_task(2, NOW + timedelta(days=7)),
        make_task(3, NOW + timedelta(days=7, seconds=1)),
        make_task(4, NOW - timedelta(seconds=1)),
    ]
    assert ids(DueFilter.DUE_THIS_WEEK.apply(items, NOW)) == [1, 2]


def test_past_due_is_strict():
    assert DueFilter.PAST_DUE.apply([make_task(1, NOW)], NOW) == []


def test_completion_filter():
    items = [
        make_task(1, NOW, completed=True),
        make_task(2, NOW),
        make_task(3, NOW, completed=True),
    ]
    assert ids(CompletionFilter.COMPLETE.apply(items)) == [1, 3]
    assert ids(CompletionFilter.INCOMPLETE.apply(items)) == [2]
    assert CompletionFilter.ALL.apply(items) == items


def test_filters_do_not_mutate_input(tasks):
    snapshot = list(tasks)
    result = DueFilter.PAST_DUE.apply(tasks, NOW)
    result.clear()
    assert tasks == snapshot


def test_filter_tasks_due_then_completion(tasks):
    tasks[0] = make_task(1, NOW - timedelta(days=3), completed=True)
    result = filter_tasks(tasks, NOW, DueFilter.PAST_DUE, CompletionFilter.INCOMPLETE)
    assert ids(result) == [2]


def test_filter_tasks_all_all_is_identity(tasks):
    result = filter_tasks(tasks, NOW, DueFilter.ALL, CompletionFilter.ALL)
    assert result == tasks


@pytest.mark.parametrize(
    "token, expected",
    [("today", DueFilter.DUE_TODAY), ("week", DueFilter.DUE_THIS_WEEK), ("past", DueFilter.PAST_DUE), ("all", DueFilter.ALL)],
)
def test_parse_due_filter(token, expected):
    assert DueFilter.parse(token) is expected


@pytest.mark.parametrize(
    "token, expected",
    [("all", CompletionFilter.ALL), ("complete", CompletionFilter.COMPLETE), ("incomplete", CompletionFilter.INCOMPLETE)],
)
def test_parse_completion_filter(token, expected):
    assert CompletionFilter.parse(token) is expected


def test_parse_rejects_unknown_tokens():
    with pytest.raises(InvalidInputError):
        DueFilter.parse("tomorrow")
    with pytest.raises(InvalidInputError):
        CompletionFilter.parse("Done")
