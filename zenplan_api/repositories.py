from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from sqlalchemy import text as sql_text

from zenplan.admin import initial_role
from zenplan_api.db import get_sessionmaker
from zenplan_api.db_init import USER_DOCUMENTS_TABLE

logger = logging.getLogger(__name__)

COLLECTION_FIELDS = ("tasks", "weeklyGoals", "moodLogs")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def _decode_document(uid: str, raw) -> dict:
    try:
        payload = json.loads(raw or "{}")
    except ValueError:
        logger.warning("Stored document for %s is not valid JSON", uid)
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    return payload


async def _fetch_raw(session, uid: str):
    row = (await session.execute(
        sql_text(f"SELECT payload_json FROM {USER_DOCUMENTS_TABLE} WHERE uid = :uid"),
        {"uid": uid},
    )).fetchone()
    return row[0] if row else None


async def _store(session, uid: str, payload: dict) -> None:
    now = _now_iso()
    await session.execute(
        sql_text(
            f"""
            INSERT INTO {USER_DOCUMENTS_TABLE} (uid, payload_json, created_at, updated_at)
            VALUES (:uid, :payload_json, :created_at, :updated_at)
            ON CONFLICT(uid) DO UPDATE SET
                payload_json = EXCLUDED.payload_json,
                updated_at = EXCLUDED.updated_at
            """
        ),
        {
            "uid": uid,
            "payload_json": json.dumps(payload, ensure_ascii=False),
            "created_at": now,
            "updated_at": now,
        },
    )


async def get_user_document(uid: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        raw = await _fetch_raw(session, uid)
    if raw is None:
        return None
    return _decode_document(uid, raw)


async def merge_user_document(uid: str, patch: dict) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        raw = await _fetch_raw(session, uid)
        document = _decode_document(uid, raw) if raw is not None else {}
        document.update(patch)
        await _store(session, uid, document)
        await session.commit()
    return document


async def ensure_profile(uid: str, email: str, display_name: str, photo_url: str, super_admin_emails: list[str]) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        raw = await _fetch_raw(session, uid)
        document = _decode_document(uid, raw) if raw is not None else {}
        if document.get("uid") and document.get("role"):
            return document
        profile = {
            "uid": uid,
            "email": email or "",
            "displayName": display_name or "User",
            "photoURL": photo_url or "",
            "role": initial_role(email, super_admin_emails),
            "createdAt": _now_ms(),
        }
        for key, value in profile.items():
            document.setdefault(key, value)
        await _store(session, uid, document)
        await session.commit()
    logger.info("Created profile for %s with role %s", uid, document.get("role"))
    return document


async def list_user_profiles() -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(f"SELECT uid, payload_json FROM {USER_DOCUMENTS_TABLE} ORDER BY created_at, uid")
        )).mappings().all()
    profiles = []
    for row in rows:
        document = _decode_document(row["uid"], row["payload_json"])
        if not document.get("uid"):
            continue
        profiles.append({k: v for k, v in document.items() if k not in COLLECTION_FIELDS})
    return profiles


async def set_user_role(uid: str, role: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        raw = await _fetch_raw(session, uid)
        if raw is None:
            return None
        document = _decode_document(uid, raw)
        document["role"] = role
        await _store(session, uid, document)
        await session.commit()
    return document
