from __future__ import annotations

import logging
from typing import Iterable, Sequence

from zenplan.constants import ROLE_SUPER_ADMIN, USER_ROLES
from zenplan.errors import InvalidMutationInput, RemoteUnavailable, RoleChangeRejected
from zenplan.models import UserData
from zenplan.remote import RemoteDocumentStore

logger = logging.getLogger(__name__)


def initial_role(email: str, super_admin_emails: Iterable[str]) -> str:
    normalized = {item.strip().lower() for item in super_admin_emails if item and item.strip()}
    if (email or "").strip().lower() in normalized:
        return ROLE_SUPER_ADMIN
    return "user"


def check_role_change(actor: UserData, target_uid: str, new_role: str) -> None:
    if new_role not in USER_ROLES:
        raise InvalidMutationInput(f"Unknown role: {new_role!r}")
    if actor.role != ROLE_SUPER_ADMIN:
        raise RoleChangeRejected("Only Super Admins can change roles.")
    if target_uid == actor.uid:
        raise RoleChangeRejected("You cannot change your own role.")


async def load_users(remote: RemoteDocumentStore) -> list[UserData]:
    try:
        return await remote.list_users()
    except RemoteUnavailable:
        logger.exception("Failed to load users")
        return []


async def change_role(
    remote: RemoteDocumentStore,
    actor: UserData,
    users: Sequence[UserData],
    target_uid: str,
    new_role: str,
) -> list[UserData]:
    check_role_change(actor, target_uid, new_role)
    await remote.update_user_role(target_uid, new_role)
    return [
        user.model_copy(update={"role": new_role}) if user.uid == target_uid else user
        for user in users
    ]
