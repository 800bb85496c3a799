from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

import pandas as pd

from zenplan.constants import HISTORY_WEEKS_BACK, STATUS_COMPLETED
from zenplan.metrics import local_date, round_half_up, week_start
from zenplan.models import Task, WeeklyGoal

HISTORY_COLUMNS = ["kind", "created_at", "done"]


def _short_label(day: date) -> str:
    return f"{day.strftime('%b')} {day.day}"


def _bucket_stats(frame: pd.DataFrame) -> dict:
    total = int(len(frame))
    completed = int(frame["done"].sum()) if total else 0
    percent = round_half_up((completed / total) * 100) if total > 0 else 0
    return {"total": total, "completed": completed, "percent": percent}


def history_frame(tasks: Sequence[Task], goals: Sequence[WeeklyGoal]) -> pd.DataFrame:
    records = [
        {"kind": "task", "created_at": task.created_at, "done": task.status == STATUS_COMPLETED}
        for task in tasks
    ] + [
        {"kind": "goal", "created_at": goal.created_at, "done": bool(goal.is_done)}
        for goal in goals
    ]
    frame = pd.DataFrame(records, columns=HISTORY_COLUMNS)
    frame["week"] = [week_start(local_date(int(ms))).isoformat() for ms in frame["created_at"]]
    return frame


def weekly_history(
    tasks: Sequence[Task],
    goals: Sequence[WeeklyGoal],
    today: date,
    weeks_back: int = HISTORY_WEEKS_BACK,
) -> list[dict]:
    """Per-week goal/task completion for the last ``weeks_back`` weeks, newest first.

    Weeks without any goals or tasks are skipped.
    """
    frame = history_frame(tasks, goals)
    if frame.empty:
        return []
    current_monday = week_start(today)
    rows = []
    for index in range(weeks_back):
        monday = current_monday - timedelta(weeks=index)
        sunday = monday + timedelta(days=6)
        week = frame[frame["week"] == monday.isoformat()]
        if week.empty:
            continue
        rows.append(
            {
                "label": f"{_short_label(monday)} - {_short_label(sunday)}",
                "week_index": index,
                "week_start": monday.isoformat(),
                "goals": _bucket_stats(week[week["kind"] == "goal"]),
                "tasks": _bucket_stats(week[week["kind"] == "task"]),
            }
        )
    return rows
