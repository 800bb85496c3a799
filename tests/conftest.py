from __future__ import annotations

from datetime import datetime

import pytest

from zenplan.errors import RemoteUnavailable
from zenplan.local_store import LocalRepository
from zenplan.models import UserData
from zenplan.storage import KeyValueStore

FIXED_NOW = datetime(2026, 10, 19, 9, 30)


class FakeDocumentStore:
    """In-memory stand-in for RemoteDocumentStore."""

    def __init__(self, documents=None, fail=False):
        self.documents = documents if documents is not None else {}
        self.fail = fail
        self.writes = []
        self.role_updates = []

    def _check(self):
        if self.fail:
            raise RemoteUnavailable("document store offline")

    async def fetch_user_document(self, uid):
        self._check()
        document = self.documents.get(uid)
        return dict(document) if document is not None else None

    async def merge_write_user_document(self, uid, partial):
        self._check()
        self.writes.append((uid, partial))
        self.documents.setdefault(uid, {}).update(partial)
        return dict(self.documents[uid])

    async def ensure_profile(self, identity):
        self._check()
        document = self.documents.setdefault(identity.uid, {})
        profile = {
            "uid": identity.uid,
            "email": identity.email,
            "displayName": identity.display_name,
            "photoURL": identity.photo_url,
            "role": "user",
            "createdAt": 0,
        }
        for key, value in profile.items():
            document.setdefault(key, value)
        return UserData.model_validate(document)

    async def list_users(self):
        self._check()
        return [UserData.model_validate(doc) for doc in self.documents.values()]

    async def update_user_role(self, uid, role):
        self._check()
        self.role_updates.append((uid, role))
        self.documents.setdefault(uid, {})["role"] = role


@pytest.fixture
def store(tmp_path):
    kv = KeyValueStore(f"sqlite:///{tmp_path / 'local.db'}")
    yield kv
    kv.close()


@pytest.fixture
def local_repo(store):
    return LocalRepository(store)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def make_remote():
    return FakeDocumentStore
