from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Sequence

from zenplan.constants import (
    FULL_PROGRESS,
    STATUS_NOT_COMPLETED,
    TASK_STATUSES,
)
from zenplan.models import Task, WeeklyGoal, now_ms


@dataclass(frozen=True)
class TaskStats:
    total: int
    weighted_done: float
    completed_percent: int
    remaining_percent: int
    missed_count: int


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_task_stats(tasks: Sequence[Task]) -> TaskStats:
    total = len(tasks)
    # A task at 40% contributes 0.4: completion is fractional.
    weighted_done = sum(task.progress / FULL_PROGRESS for task in tasks)
    missed_count = sum(1 for task in tasks if task.status == STATUS_NOT_COMPLETED)
    completed_percent = round_half_up((weighted_done / total) * 100) if total > 0 else 0
    remaining_percent = 100 - completed_percent if total > 0 else 0
    return TaskStats(
        total=total,
        weighted_done=weighted_done,
        completed_percent=completed_percent,
        remaining_percent=remaining_percent,
        missed_count=missed_count,
    )


def partition_by_status(tasks: Sequence[Task]) -> dict[str, list[Task]]:
    columns: dict[str, list[Task]] = {status: [] for status in TASK_STATUSES}
    for task in tasks:
        columns.setdefault(task.status, []).append(task)
    return columns


def goal_progress(goals: Sequence[WeeklyGoal]) -> int:
    if not goals:
        return 0
    done = sum(1 for goal in goals if goal.is_done)
    return round_half_up((done / len(goals)) * 100)


def local_date(timestamp_ms: int) -> date:
    return datetime.fromtimestamp(timestamp_ms / 1000).date()


def day_bounds(day: date) -> tuple[int, int]:
    start = datetime.combine(day, time.min)
    end = datetime.combine(day + timedelta(days=1), time.min)
    return now_ms(start), now_ms(end) - 1


def week_start(day: date) -> date:
    # weekday() is 0 for Monday, 6 for Sunday.
    return day - timedelta(days=day.weekday())


def week_bounds(day: date) -> tuple[int, int]:
    monday = week_start(day)
    start, _ = day_bounds(monday)
    _, end = day_bounds(monday + timedelta(days=6))
    return start, end


def tasks_for_day(tasks: Sequence[Task], day: date) -> list[Task]:
    return [task for task in tasks if local_date(task.created_at) == day]


def goals_for_week(goals: Sequence[WeeklyGoal], day: date) -> list[WeeklyGoal]:
    start, end = week_bounds(day)
    return [goal for goal in goals if start <= goal.created_at <= end]


def greeting(hour: int) -> str:
    if hour < 12:
        return "Good Morning"
    if hour < 18:
        return "Good Afternoon"
    return "Good Evening"
