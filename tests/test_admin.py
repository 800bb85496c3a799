import asyncio

import pytest

from zenplan import admin
from zenplan.errors import InvalidMutationInput, RoleChangeRejected
from zenplan.models import UserData

BOSS = UserData(uid="boss", email="boss@example.com", role="super_admin")
ADMIN = UserData(uid="adm", email="adm@example.com", role="admin")
MEMBER = UserData(uid="u1", email="u1@example.com", role="user")


def test_initial_role():
    emails = ["Boss@Example.com ", ""]
    assert admin.initial_role("boss@example.com", emails) == "super_admin"
    assert admin.initial_role("someone@example.com", emails) == "user"
    assert admin.initial_role("", emails) == "user"


def test_only_super_admin_changes_roles():
    with pytest.raises(RoleChangeRejected):
        admin.check_role_change(ADMIN, "u1", "admin")


def test_cannot_change_own_role():
    with pytest.raises(RoleChangeRejected):
        admin.check_role_change(BOSS, "boss", "user")


def test_unknown_role_rejected():
    with pytest.raises(InvalidMutationInput):
        admin.check_role_change(BOSS, "u1", "owner")


def test_change_role_writes_and_updates_list(make_remote):
    remote = make_remote()
    users = [BOSS, MEMBER]
    updated = asyncio.run(admin.change_role(remote, BOSS, users, "u1", "admin"))
    assert remote.role_updates == [("u1", "admin")]
    assert [user.role for user in updated] == ["super_admin", "admin"]
    assert users[1].role == "user"


def test_rejected_change_never_reaches_remote(make_remote):
    remote = make_remote()
    with pytest.raises(RoleChangeRejected):
        asyncio.run(admin.change_role(remote, MEMBER, [BOSS, MEMBER], "boss", "user"))
    assert remote.role_updates == []


def test_load_users(make_remote):
    remote = make_remote({"u1": {"uid": "u1", "role": "user"}})
    assert [user.uid for user in asyncio.run(admin.load_users(remote))] == ["u1"]


def test_load_users_survives_outage(make_remote):
    assert asyncio.run(admin.load_users(make_remote(fail=True))) == []
