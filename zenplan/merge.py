"""By-id reconciliation of a local and a remote collection of one entity type."""
from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from zenplan.models import Task, WeeklyGoal, new_id

Entity = TypeVar("Entity", Task, WeeklyGoal)


def version_of(entity) -> int:
    """Version timestamp used to break conflicts: last edit, else creation."""
    last_updated = getattr(entity, "last_updated", None)
    if last_updated is not None:
        return int(last_updated)
    return int(entity.created_at or 0)


def merge_by_id(
    local: Sequence[Entity],
    remote: Sequence[Entity],
    id_factory: Callable[[], str] = new_id,
) -> list[Entity]:
    merged: dict[str, Entity] = {}
    for item in remote:
        if item is not None and item.id:
            merged[item.id] = item
    for item in local:
        if item is None:
            continue
        if not item.id:
            item = item.model_copy(update={"id": id_factory()})
        existing = merged.get(item.id)
        if existing is None:
            merged[item.id] = item
        elif version_of(item) > version_of(existing):
            merged[item.id] = item
    return list(merged.values())


def needs_write_back(merged: Sequence[Entity], remote: Sequence[Entity]) -> bool:
    return len(merged) != len(remote)
