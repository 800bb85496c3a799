from __future__ import annotations

from typing import Callable, Sequence

from zenplan.constants import MOOD_CONTEXTS, MOOD_INSIGHTS, MOOD_PROMPT_COOLDOWN_MS, MOODS
from zenplan.errors import InvalidMutationInput
from zenplan.models import MoodLog, new_id


def record_mood(
    logs: Sequence[MoodLog],
    mood: str,
    context: str,
    now: int,
    id_factory: Callable[[], str] = new_id,
) -> list[MoodLog]:
    if mood not in MOODS:
        raise InvalidMutationInput(f"Unknown mood: {mood!r}")
    if context not in MOOD_CONTEXTS:
        raise InvalidMutationInput(f"Unknown mood context: {context!r}")
    return [*logs, MoodLog(id=id_factory(), mood=mood, timestamp=now, context=context)]


def should_prompt_mood(logs: Sequence[MoodLog], now: int) -> bool:
    return not any(now - log.timestamp < MOOD_PROMPT_COOLDOWN_MS for log in logs)


def mood_insight(mood: str) -> str:
    return MOOD_INSIGHTS.get(mood, "")
