import asyncio
import json

import httpx
import pytest

from zenplan.config import ClientSettings
from zenplan.errors import RemoteUnavailable
from zenplan.models import Identity
from zenplan.remote import RemoteDocumentStore, build_remote_store


def _store(handler):
    return RemoteDocumentStore("http://docs.test/", "secret", transport=httpx.MockTransport(handler))


def test_fetch_sends_token_and_returns_document():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"uid": "u1", "tasks": []})

    document = asyncio.run(_store(handler).fetch_user_document("u1"))
    assert document == {"uid": "u1", "tasks": []}
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/v1/users/u1"
    assert seen[0].headers["X-Backend-Token"] == "secret"


def test_fetch_missing_document_returns_none():
    document = asyncio.run(_store(lambda request: httpx.Response(404, json={"detail": "nope"})).fetch_user_document("u1"))
    assert document is None


def test_server_error_raises_remote_unavailable():
    store = _store(lambda request: httpx.Response(500, json={"detail": "Internal error"}))
    with pytest.raises(RemoteUnavailable):
        asyncio.run(store.fetch_user_document("u1"))


def test_transport_error_raises_remote_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteUnavailable):
        asyncio.run(_store(handler).merge_write_user_document("u1", {"streak": 1}))


def test_non_json_body_raises_remote_unavailable():
    store = _store(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(RemoteUnavailable):
        asyncio.run(store.fetch_user_document("u1"))


def test_merge_write_patches_only_given_fields():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"uid": "u1", "streak": 2})

    asyncio.run(_store(handler).merge_write_user_document("u1", {"streak": 2, "lastStreakDate": "2026-10-19"}))
    assert seen[0].method == "PATCH"
    assert json.loads(seen[0].content) == {"streak": 2, "lastStreakDate": "2026-10-19"}


def test_ensure_profile_posts_identity():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"uid": "u1", "email": "a@b.c", "role": "user", "createdAt": 5})

    profile = asyncio.run(_store(handler).ensure_profile(Identity(uid="u1", display_name="Ann", email="a@b.c")))
    assert profile.role == "user"
    assert seen[0].url.path == "/v1/users/u1/profile"
    assert json.loads(seen[0].content) == {"email": "a@b.c", "displayName": "Ann", "photoURL": ""}


def test_list_users_and_update_role():
    seen = []

    def handler(request):
        seen.append(request)
        if request.method == "GET":
            return httpx.Response(200, json={"items": [{"uid": "u1", "role": "admin"}]})
        return httpx.Response(200, json={"ok": True, "role": "user"})

    store = _store(handler)
    users = asyncio.run(store.list_users())
    asyncio.run(store.update_user_role("u1", "user"))
    assert [user.role for user in users] == ["admin"]
    assert seen[1].method == "PUT"
    assert seen[1].url.path == "/v1/users/u1/role"
    assert json.loads(seen[1].content) == {"role": "user"}


def test_list_users_rejects_unexpected_shape():
    store = _store(lambda request: httpx.Response(200, json=[{"uid": "u1"}]))
    with pytest.raises(RemoteUnavailable):
        asyncio.run(store.list_users())


def test_remote_store_requires_url_and_token():
    assert build_remote_store(ClientSettings(ZENPLAN_API_BASE_URL="", ZENPLAN_BACKEND_TOKEN="t")) is None
    store = build_remote_store(
        ClientSettings(ZENPLAN_API_BASE_URL="http://docs.test", ZENPLAN_BACKEND_TOKEN="t", ZENPLAN_REMOTE_TIMEOUT=3)
    )
    assert store.base_url == "http://docs.test"
    assert store.timeout == 3


def test_unencodable_payload_raises_remote_unavailable():
    store = _store(lambda request: httpx.Response(200, json={}))
    with pytest.raises(RemoteUnavailable):
        asyncio.run(store.merge_write_user_document("u1", {"streak": object()}))


def test_bad_base_url_raises_remote_unavailable():
    store = RemoteDocumentStore("http://docs.test:not-a-port", "secret", transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    with pytest.raises(RemoteUnavailable):
        asyncio.run(store.fetch_user_document("u1"))
