"""Pure transformations over task and weekly-goal collections.

Every function returns a new list and leaves its input untouched. Titles and
progress values are validated by the caller (see ``validate_title`` and
``clamp_progress``) before they get here.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence

from zenplan.constants import (
    FULL_PROGRESS,
    REOPENED_PROGRESS,
    STATUS_COMPLETED,
    STATUS_PENDING,
    TASK_STATUSES,
)
from zenplan.errors import InvalidMutationInput
from zenplan.models import Task, WeeklyGoal, new_id


def validate_title(title) -> str:
    clean = str(title or "").strip()
    if not clean:
        raise InvalidMutationInput("Title cannot be empty")
    return clean


def validate_status(status) -> str:
    if status not in TASK_STATUSES:
        raise InvalidMutationInput(f"Unknown task status: {status!r}")
    return status


def clamp_progress(value) -> int:
    try:
        progress = int(round(float(value)))
    except (TypeError, ValueError) as exc:
        raise InvalidMutationInput(f"Invalid progress value: {value!r}") from exc
    return max(0, min(FULL_PROGRESS, progress))


def find_task(tasks: Sequence[Task], task_id: str) -> Optional[Task]:
    for task in tasks:
        if task.id == task_id:
            return task
    return None


def _replace(items, item_id, change: Callable):
    return [change(item) if item.id == item_id else item for item in items]


def add_task(
    tasks: Sequence[Task],
    title: str,
    description: str = "",
    now: int = 0,
    id_factory: Callable[[], str] = new_id,
) -> list[Task]:
    task = Task(
        id=id_factory(),
        title=title,
        description=description or "",
        status=STATUS_PENDING,
        progress=0,
        created_at=now,
        last_updated=now,
    )
    return [task, *tasks]


def edit_task(tasks: Sequence[Task], task_id: str, title: str, description: str, now: int) -> list[Task]:
    return _replace(
        tasks,
        task_id,
        lambda task: task.model_copy(
            update={"title": title, "description": description or "", "last_updated": now}
        ),
    )


def progress_after_status(task: Task, status: str) -> int:
    if status == STATUS_COMPLETED:
        return FULL_PROGRESS
    # Reopened tasks are assumed half-done.
    if status == STATUS_PENDING and task.progress == FULL_PROGRESS:
        return REOPENED_PROGRESS
    return task.progress


def status_after_progress(task: Task, progress: int) -> str:
    if progress == FULL_PROGRESS:
        return STATUS_COMPLETED
    if progress < FULL_PROGRESS and task.status == STATUS_COMPLETED:
        return STATUS_PENDING
    return task.status


def set_status(tasks: Sequence[Task], task_id: str, status: str, now: int) -> list[Task]:
    return _replace(
        tasks,
        task_id,
        lambda task: task.model_copy(
            update={
                "status": status,
                "progress": progress_after_status(task, status),
                "last_updated": now,
            }
        ),
    )


def set_progress(tasks: Sequence[Task], task_id: str, progress: int, now: int) -> list[Task]:
    return _replace(
        tasks,
        task_id,
        lambda task: task.model_copy(
            update={
                "status": status_after_progress(task, progress),
                "progress": progress,
                "last_updated": now,
            }
        ),
    )


def delete_task(tasks: Sequence[Task], task_id: str) -> list[Task]:
    return [task for task in tasks if task.id != task_id]


def reached_completion(tasks: Sequence[Task], task_id: str) -> bool:
    """True when the task sits at full progress, the trigger for the rating overlay and mood prompt."""
    task = find_task(tasks, task_id)
    return task is not None and task.progress == FULL_PROGRESS


def add_goal(
    goals: Sequence[WeeklyGoal],
    title: str,
    now: int = 0,
    id_factory: Callable[[], str] = new_id,
) -> list[WeeklyGoal]:
    goal = WeeklyGoal(id=id_factory(), title=title, is_done=False, created_at=now)
    return [*goals, goal]


def toggle_goal(goals: Sequence[WeeklyGoal], goal_id: str, now: int) -> list[WeeklyGoal]:
    return _replace(
        goals,
        goal_id,
        lambda goal: goal.model_copy(update={"is_done": not goal.is_done, "last_updated": now}),
    )


def delete_goal(goals: Sequence[WeeklyGoal], goal_id: str) -> list[WeeklyGoal]:
    return [goal for goal in goals if goal.id != goal_id]
