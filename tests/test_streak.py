from datetime import date, datetime

from zenplan.models import Task, now_ms
from zenplan.streak import StreakState, check_streak_reset, day_fully_completed, evaluate_day

TODAY = date(2026, 10, 19)


def _task(status="completed", day=TODAY):
    progress = 100 if status == "completed" else 0
    return Task(
        id=f"{status}-{day}",
        title="Task",
        status=status,
        progress=progress,
        created_at=now_ms(datetime.combine(day, datetime.min.time()).replace(hour=9)),
    )


def test_empty_day_is_not_complete():
    assert day_fully_completed([], TODAY) is False
    state, outcome = evaluate_day(StreakState(), [], TODAY)
    assert state == StreakState()
    assert outcome.celebrate is False


def test_older_tasks_do_not_count_for_today():
    assert day_fully_completed([_task(day=date(2026, 10, 18))], TODAY) is False


def test_first_completed_day_starts_streak():
    state, outcome = evaluate_day(StreakState(), [_task()], TODAY)
    assert outcome.celebrate is True
    assert outcome.streak_incremented is True
    assert state.streak == 1
    assert state.last_streak_date == "2026-10-19"
    assert state.last_celebrated_day == "2026-10-19"


def test_evaluation_is_idempotent_within_a_day():
    tasks = [_task()]
    state, _ = evaluate_day(StreakState(), tasks, TODAY)
    again, outcome = evaluate_day(state, tasks, TODAY)
    assert again == state
    assert outcome.celebrate is False
    assert outcome.streak_incremented is False


def test_consecutive_day_extends_streak():
    state = StreakState(streak=3, last_streak_date="2026-10-18", last_celebrated_day="2026-10-18")
    state, outcome = evaluate_day(state, [_task()], TODAY)
    assert outcome.streak_incremented is True
    assert state.streak == 4


def test_gap_restarts_streak_at_one():
    state = StreakState(streak=3, last_streak_date="2026-10-10")
    state, _ = evaluate_day(state, [_task()], TODAY)
    assert state.streak == 1


def test_pending_task_blocks_celebration():
    state, outcome = evaluate_day(StreakState(), [_task(), _task("pending")], TODAY)
    assert outcome.celebrate is False
    assert state.streak == 0


def test_already_counted_day_celebrates_without_increment():
    state = StreakState(streak=2, last_streak_date="2026-10-19")
    state, outcome = evaluate_day(state, [_task()], TODAY)
    assert outcome.celebrate is True
    assert outcome.streak_incremented is False
    assert state.streak == 2


def test_reset_after_missed_day():
    state = StreakState(streak=5, last_streak_date="2026-10-17")
    assert check_streak_reset(state, TODAY).streak == 0


def test_no_reset_for_today_or_yesterday():
    for last in ("2026-10-19", "2026-10-18"):
        state = StreakState(streak=5, last_streak_date=last)
        assert check_streak_reset(state, TODAY) == state


def test_no_reset_without_history():
    assert check_streak_reset(StreakState(streak=0), TODAY) == StreakState(streak=0)
