"""Application state for one planner session.

All user actions go through ``PlannerSession``: the pure engines compute the
new collections, local storage is written synchronously, the document store
is updated in the background when a user is signed in, and subscribers are
notified once per transition.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence, Type

from pydantic import ValidationError

from zenplan import mutations
from zenplan.config import ClientSettings, get_settings
from zenplan.constants import (
    FULL_PROGRESS,
    GOALS_KEY,
    LAST_CELEBRATED_KEY,
    LAST_STREAK_DATE_KEY,
    MOODS_KEY,
    STATUS_COMPLETED,
    STREAK_KEY,
    TASKS_KEY,
    THEME_KEY,
    THEMES,
)
from zenplan.errors import RemoteUnavailable
from zenplan.local_store import LocalRepository
from zenplan.logging_config import configure_logging
from zenplan.merge import merge_by_id, needs_write_back
from zenplan.metrics import TaskStats, compute_task_stats
from zenplan.models import (
    EntityModel,
    Identity,
    MoodLog,
    Task,
    UserData,
    WeeklyGoal,
    dump_collection,
    fallback_profile,
    now_ms,
)
from zenplan.mood import mood_insight, record_mood, should_prompt_mood
from zenplan.remote import RemoteDocumentStore, build_remote_store
from zenplan.storage import KeyValueStore
from zenplan.streak import StreakState, check_streak_reset, evaluate_day

logger = logging.getLogger(__name__)

PHASE_ANONYMOUS = "anonymous"
PHASE_LOADING = "loading"
PHASE_READY = "ready"

COLLECTION_FIELDS = {"tasks", "weeklyGoals", "moodLogs"}


@dataclass(frozen=True)
class SessionEvent:
    kind: str
    payload: dict = field(default_factory=dict)


def decode_remote_items(document: dict, field_name: str, model: Type[EntityModel]) -> list:
    raw_items = document.get(field_name) or []
    if not isinstance(raw_items, list):
        logger.warning("Remote %s is not a list; ignoring it", field_name)
        return []
    items = []
    for raw in raw_items:
        try:
            items.append(model.model_validate(raw))
        except ValidationError:
            logger.warning("Skipping invalid remote %s entry", field_name)
    return items


class PlannerSession:
    def __init__(
        self,
        local: LocalRepository,
        remote: RemoteDocumentStore | None = None,
        clock: Callable[[], datetime] = datetime.now,
        default_theme: str = "light",
    ):
        self.local = local
        self.remote = remote
        self.clock = clock
        self.default_theme = default_theme if default_theme in THEMES else "light"

        self.tasks: list[Task] = []
        self.goals: list[WeeklyGoal] = []
        self.mood_logs: list[MoodLog] = []
        self.streak = StreakState()
        self.theme = self.default_theme
        self.identity: Identity | None = None
        self.profile: UserData | None = None
        self.phase = PHASE_ANONYMOUS
        self.mood_context = "completion"

        self._applied_theme: str | None = None
        self._subscribers: list[Callable[[SessionEvent], Any]] = []
        self._pending: set[asyncio.Task] = set()

    def subscribe(self, callback: Callable[[SessionEvent], Any]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, event: SessionEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Session subscriber failed on %s", event.kind)

    def apply_effects(self) -> None:
        if self.theme != self._applied_theme:
            self.local.set_value(THEME_KEY, self.theme)
            self._applied_theme = self.theme

    def _transition(self, events: Sequence[SessionEvent] = ()) -> None:
        self.apply_effects()
        self._publish(SessionEvent("state", {"phase": self.phase}))
        for event in events:
            self._publish(event)

    @property
    def stats(self) -> TaskStats:
        return compute_task_stats(self.tasks)

    @property
    def syncing(self) -> bool:
        return self.remote is not None and self.identity is not None and self.phase == PHASE_READY

    @property
    def saving(self) -> bool:
        return bool(self._pending)

    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.role in {"admin", "super_admin"}

    def _now_ms(self) -> int:
        return now_ms(self.clock())

    def _today(self) -> date:
        return self.clock().date()

    def load(self) -> None:
        self.tasks = self.local.load(TASKS_KEY, Task)
        self.goals = self.local.load(GOALS_KEY, WeeklyGoal)
        self.mood_logs = self.local.load(MOODS_KEY, MoodLog)
        self.streak = StreakState(
            streak=self.local.get_int(STREAK_KEY, 0),
            last_streak_date=self.local.get_str(LAST_STREAK_DATE_KEY),
            last_celebrated_day=self.local.get_str(LAST_CELEBRATED_KEY),
        )
        theme = self.local.get_str(THEME_KEY)
        self.theme = theme if theme in THEMES else self.default_theme
        self._check_streak_reset()
        self._transition()

    def _check_streak_reset(self) -> None:
        checked = check_streak_reset(self.streak, self._today())
        if checked != self.streak:
            logger.info("Streak chain broken (last streak %s)", self.streak.last_streak_date)
            self.streak = checked
            self.local.set_value(STREAK_KEY, checked.streak)

    def _evaluate_streak(self) -> list[SessionEvent]:
        state, outcome = evaluate_day(self.streak, self.tasks, self._today())
        if state == self.streak:
            return []
        self.streak = state
        self.local.set_value(LAST_CELEBRATED_KEY, state.last_celebrated_day)
        events = []
        if outcome.celebrate:
            events.append(SessionEvent("celebration", {"day": state.last_celebrated_day}))
        if outcome.streak_incremented:
            self.local.set_value(STREAK_KEY, state.streak)
            self.local.set_value(LAST_STREAK_DATE_KEY, state.last_streak_date)
            self._push({"streak": state.streak, "lastStreakDate": state.last_streak_date})
            events.append(SessionEvent("streak_celebration", {"streak": state.streak}))
        return events

    def _completion_feedback(self) -> list[SessionEvent]:
        events = [
            SessionEvent("rating_overlay", {"completed_percent": self.stats.completed_percent})
        ]
        if should_prompt_mood(self.mood_logs, self._now_ms()):
            self.mood_context = "completion"
            events.append(SessionEvent("mood_prompt", {"context": self.mood_context}))
        return events

    def _set_tasks(self, tasks: list[Task], completed_task_id: Optional[str] = None) -> None:
        self.tasks = tasks
        self.local.save(TASKS_KEY, tasks)
        self._push({"tasks": dump_collection(tasks)})
        events = self._evaluate_streak()
        if completed_task_id is not None and mutations.reached_completion(tasks, completed_task_id):
            events.extend(self._completion_feedback())
        self._transition(events)

    def _set_goals(self, goals: list[WeeklyGoal]) -> None:
        self.goals = goals
        self.local.save(GOALS_KEY, goals)
        self._push({"weeklyGoals": dump_collection(goals)})
        self._transition()

    def add_task(self, title: str, description: str = "") -> Task:
        title = mutations.validate_title(title)
        self._set_tasks(mutations.add_task(self.tasks, title, description, now=self._now_ms()))
        return self.tasks[0]

    def edit_task(self, task_id: str, title: str, description: str = "") -> None:
        title = mutations.validate_title(title)
        self._set_tasks(mutations.edit_task(self.tasks, task_id, title, description, self._now_ms()))

    def set_status(self, task_id: str, status: str) -> None:
        status = mutations.validate_status(status)
        self._set_tasks(
            mutations.set_status(self.tasks, task_id, status, self._now_ms()),
            completed_task_id=task_id if status == STATUS_COMPLETED else None,
        )

    def set_progress(self, task_id: str, progress) -> None:
        progress = mutations.clamp_progress(progress)
        self._set_tasks(
            mutations.set_progress(self.tasks, task_id, progress, self._now_ms()),
            completed_task_id=task_id if progress == FULL_PROGRESS else None,
        )

    def delete_task(self, task_id: str) -> None:
        self._set_tasks(mutations.delete_task(self.tasks, task_id))

    def add_goal(self, title: str) -> WeeklyGoal:
        title = mutations.validate_title(title)
        self._set_goals(mutations.add_goal(self.goals, title, now=self._now_ms()))
        return self.goals[-1]

    def toggle_goal(self, goal_id: str) -> None:
        self._set_goals(mutations.toggle_goal(self.goals, goal_id, self._now_ms()))

    def delete_goal(self, goal_id: str) -> None:
        self._set_goals(mutations.delete_goal(self.goals, goal_id))

    def log_mood(self, mood: str, context: str | None = None) -> MoodLog:
        self.mood_logs = record_mood(self.mood_logs, mood, context or self.mood_context, self._now_ms())
        self.local.save(MOODS_KEY, self.mood_logs)
        self._push({"moodLogs": dump_collection(self.mood_logs)})
        logged = self.mood_logs[-1]
        self._transition([SessionEvent("mood_logged", {"mood": mood, "insight": mood_insight(mood)})])
        return logged

    def toggle_theme(self) -> str:
        self.theme = "light" if self.theme == "dark" else "dark"
        self._transition([SessionEvent("theme", {"theme": self.theme})])
        return self.theme

    def refresh_day(self) -> None:
        """Re-run the day-dependent checks, e.g. after midnight."""
        self._check_streak_reset()
        self._transition(self._evaluate_streak())

    def _push(self, partial: dict) -> None:
        if not self.syncing:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; skipped remote write of %s", sorted(partial))
            return
        task = loop.create_task(self._write_remote(self.identity.uid, partial))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write_remote(self, uid: str, partial: dict) -> bool:
        try:
            await self.remote.merge_write_user_document(uid, partial)
        except RemoteUnavailable:
            logger.exception("Error saving %s to the cloud", ", ".join(sorted(partial)))
            return False
        return True

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def _load_profile(self, identity: Identity, document: dict | None) -> UserData:
        if document and document.get("uid") and document.get("role"):
            profile_fields = {k: v for k, v in document.items() if k not in COLLECTION_FIELDS}
            try:
                return UserData.model_validate(profile_fields)
            except ValidationError:
                logger.warning("Stored profile for %s is invalid; recreating it", identity.uid)
        try:
            return await self.remote.ensure_profile(identity)
        except RemoteUnavailable:
            logger.exception("Failed to load profile for %s", identity.uid)
            return fallback_profile(identity, self._now_ms())

    async def _reconcile(self, uid: str, document: dict) -> None:
        remote_tasks = decode_remote_items(document, "tasks", Task)
        remote_goals = decode_remote_items(document, "weeklyGoals", WeeklyGoal)
        merged_tasks = merge_by_id(self.tasks, remote_tasks)
        merged_goals = merge_by_id(self.goals, remote_goals)
        self.tasks = merged_tasks
        self.goals = merged_goals
        self.local.save(TASKS_KEY, merged_tasks)
        self.local.save(GOALS_KEY, merged_goals)
        if needs_write_back(merged_tasks, remote_tasks) or needs_write_back(merged_goals, remote_goals):
            logger.info("Uploading local-only entries for %s", uid)
            await self._write_remote(
                uid,
                {"tasks": dump_collection(merged_tasks), "weeklyGoals": dump_collection(merged_goals)},
            )

    async def on_identity_change(self, identity: Identity | None) -> None:
        """Identity provider callback: Anonymous -> Loading -> Ready."""
        if identity is None:
            self.identity = None
            self.profile = None
            self.phase = PHASE_ANONYMOUS
            self._transition()
            return

        self.identity = identity
        self.phase = PHASE_LOADING
        self._transition()

        if self.remote is None:
            self.profile = fallback_profile(identity, self._now_ms())
        else:
            try:
                document = await self.remote.fetch_user_document(identity.uid)
            except RemoteUnavailable:
                logger.exception("Error loading user data for %s", identity.uid)
                self.profile = fallback_profile(identity, self._now_ms())
            else:
                self.profile = await self._load_profile(identity, document)
                if document is None:
                    # First sign-in: seed the new document with the local state.
                    await self._write_remote(
                        identity.uid,
                        {"tasks": dump_collection(self.tasks), "weeklyGoals": dump_collection(self.goals)},
                    )
                else:
                    await self._reconcile(identity.uid, document)

        self.phase = PHASE_READY
        self._transition(self._evaluate_streak())

    async def sign_out(self) -> None:
        if self.syncing:
            await self.drain()
            await self._write_remote(
                self.identity.uid,
                {"tasks": dump_collection(self.tasks), "weeklyGoals": dump_collection(self.goals)},
            )
        await self.on_identity_change(None)


def build_session(settings: ClientSettings | None = None, clock: Callable[[], datetime] = datetime.now) -> PlannerSession:
    configure_logging()
    settings = settings or get_settings()
    session = PlannerSession(
        LocalRepository(KeyValueStore(settings.storage_url)),
        remote=build_remote_store(settings),
        clock=clock,
        default_theme=settings.default_theme,
    )
    session.load()
    return session
