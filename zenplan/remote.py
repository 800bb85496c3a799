from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from zenplan.config import ClientSettings
from zenplan.errors import RemoteUnavailable
from zenplan.models import Identity, UserData

logger = logging.getLogger(__name__)


def _user_path(uid: str, suffix: str = "") -> str:
    return f"/v1/users/{quote(uid, safe='')}{suffix}"


class RemoteDocumentStore:
    """Client for the per-user document store.

    Every failure (bad URL, unencodable payload, transport, HTTP status,
    undecodable body) surfaces as RemoteUnavailable. Requests are never
    retried.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"X-Backend-Token": self.token},
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        json: dict | None = None,
        allow_missing: bool = False,
    ) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=json)
        except (httpx.HTTPError, httpx.InvalidURL, TypeError) as exc:
            raise RemoteUnavailable(f"{method} {path} failed: {exc}") from exc
        if allow_missing and response.status_code == 404:
            return None
        if response.is_error:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            raise RemoteUnavailable(
                f"API error {response.status_code} {response.reason_phrase}: {detail}"
            )
        if response.status_code == 204:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteUnavailable(f"{method} {path} returned a non-JSON body") from exc

    async def fetch_user_document(self, uid: str) -> dict | None:
        payload = await self._request("GET", _user_path(uid), allow_missing=True)
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise RemoteUnavailable(f"Document for {uid} is not an object")
        return payload

    async def merge_write_user_document(self, uid: str, partial: dict) -> dict:
        payload = await self._request("PATCH", _user_path(uid), json=partial)
        logger.debug("Merged fields %s into document %s", sorted(partial), uid)
        return payload or {}

    async def ensure_profile(self, identity: Identity) -> UserData:
        payload = await self._request(
            "POST",
            _user_path(identity.uid, "/profile"),
            json={
                "email": identity.email,
                "displayName": identity.display_name or "User",
                "photoURL": identity.photo_url or "",
            },
        )
        try:
            return UserData.model_validate(payload)
        except ValidationError as exc:
            raise RemoteUnavailable(f"Invalid profile for {identity.uid}") from exc

    async def list_users(self) -> list[UserData]:
        payload = await self._request("GET", "/v1/users")
        if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
            raise RemoteUnavailable("Invalid user list")
        items = payload["items"]
        try:
            return [UserData.model_validate(item) for item in items]
        except ValidationError as exc:
            raise RemoteUnavailable("Invalid user list") from exc

    async def update_user_role(self, uid: str, role: str) -> None:
        await self._request("PUT", _user_path(uid, "/role"), json={"role": role})


def build_remote_store(settings: ClientSettings) -> RemoteDocumentStore | None:
    if not settings.remote_enabled:
        return None
    return RemoteDocumentStore(
        settings.api_base_url,
        settings.backend_token,
        timeout=settings.remote_timeout,
    )
