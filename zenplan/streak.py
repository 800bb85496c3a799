"""Daily completion streak.

The streak grows by one per calendar day, the first time every task created
that day is completed. Two markers keep this idempotent: the last streak date
guards the increment and the last celebrated day guards the celebration.
Both are ISO date strings.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Sequence

from zenplan.constants import STATUS_COMPLETED
from zenplan.metrics import tasks_for_day
from zenplan.models import Task


@dataclass(frozen=True)
class StreakState:
    streak: int = 0
    last_streak_date: str = ""
    last_celebrated_day: str = ""


@dataclass(frozen=True)
class StreakOutcome:
    celebrate: bool = False
    streak_incremented: bool = False
    streak: int = 0


def check_streak_reset(state: StreakState, today: date) -> StreakState:
    if not state.last_streak_date:
        return state
    yesterday = today - timedelta(days=1)
    if state.last_streak_date in {today.isoformat(), yesterday.isoformat()}:
        return state
    return replace(state, streak=0)


def day_fully_completed(tasks: Sequence[Task], today: date) -> bool:
    todays = tasks_for_day(tasks, today)
    return len(todays) > 0 and all(task.status == STATUS_COMPLETED for task in todays)


def evaluate_day(state: StreakState, tasks: Sequence[Task], today: date) -> tuple[StreakState, StreakOutcome]:
    today_iso = today.isoformat()
    if state.last_celebrated_day == today_iso or not day_fully_completed(tasks, today):
        return state, StreakOutcome(streak=state.streak)

    state = replace(state, last_celebrated_day=today_iso)
    if state.last_streak_date == today_iso:
        return state, StreakOutcome(celebrate=True, streak=state.streak)

    yesterday_iso = (today - timedelta(days=1)).isoformat()
    if state.last_streak_date == yesterday_iso:
        new_streak = state.streak + 1
    else:
        new_streak = 1
    state = replace(state, streak=new_streak, last_streak_date=today_iso)
    return state, StreakOutcome(celebrate=True, streak_incremented=True, streak=new_streak)
