from zenplan.merge import merge_by_id, needs_write_back, version_of
from zenplan.models import Task, WeeklyGoal


def _task(task_id, title="Task", created_at=1, last_updated=None):
    return Task(id=task_id, title=title, created_at=created_at, last_updated=last_updated)


def test_version_prefers_last_updated():
    assert version_of(_task("a", created_at=5)) == 5
    assert version_of(_task("a", created_at=5, last_updated=9)) == 9


def test_union_keeps_remote_order_then_local_only_items():
    remote = [_task("r1"), _task("shared")]
    local = [_task("l1"), _task("shared")]
    merged = merge_by_id(local, remote)
    assert [task.id for task in merged] == ["r1", "shared", "l1"]


def test_newer_local_edit_wins():
    remote = [_task("a", "Remote title", last_updated=10)]
    local = [_task("a", "Local title", last_updated=20)]
    [task] = merge_by_id(local, remote)
    assert task.title == "Local title"


def test_newer_remote_edit_wins():
    remote = [_task("a", "Remote title", last_updated=30)]
    local = [_task("a", "Local title", last_updated=20)]
    [task] = merge_by_id(local, remote)
    assert task.title == "Remote title"


def test_tie_keeps_remote_copy():
    remote = [_task("a", "Remote title", last_updated=10)]
    local = [_task("a", "Local title", last_updated=10)]
    [task] = merge_by_id(local, remote)
    assert task.title == "Remote title"


def test_no_id_is_lost():
    remote = [_task("a"), _task("b")]
    local = [_task("b"), _task("c")]
    merged = merge_by_id(local, remote)
    assert {task.id for task in merged} == {"a", "b", "c"}


def test_merge_is_idempotent():
    merged = merge_by_id([_task("x"), _task("y")], [_task("y"), _task("z")])
    assert merge_by_id(merged, merged) == merged


def test_local_items_without_id_get_one():
    local = [Task(title="Legacy", created_at=1)]
    [task] = merge_by_id(local, [], id_factory=lambda: "fresh")
    assert task.id == "fresh"
    assert task.title == "Legacy"


def test_remote_items_without_id_are_dropped():
    merged = merge_by_id([], [Task(title="Orphan"), _task("a")])
    assert [task.id for task in merged] == ["a"]


def test_goals_merge_the_same_way():
    remote = [WeeklyGoal(id="g1", title="Run", is_done=False, created_at=1)]
    local = [WeeklyGoal(id="g1", title="Run", is_done=True, created_at=1, last_updated=5)]
    [goal] = merge_by_id(local, remote)
    assert goal.is_done is True


def test_write_back_needed_only_when_sizes_differ():
    remote = [_task("a")]
    assert needs_write_back(merge_by_id([_task("b")], remote), remote) is True
    assert needs_write_back(merge_by_id([_task("a", last_updated=9)], remote), remote) is False
