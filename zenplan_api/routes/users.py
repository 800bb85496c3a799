from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from zenplan.constants import USER_ROLES
from zenplan_api.auth import require_backend_token
from zenplan_api.schemas import ProfileCreate, RolePayload, UserDocumentPatch
from zenplan_api.settings import get_settings
from zenplan_api import repositories

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_backend_token)])


@router.get("/v1/users")
async def list_users():
    items = await repositories.list_user_profiles()
    return {"items": items}


@router.get("/v1/users/{uid}")
async def get_user_document(uid: str):
    document = await repositories.get_user_document(uid)
    if document is None:
        raise HTTPException(status_code=404, detail="User document not found")
    return document


@router.patch("/v1/users/{uid}")
async def merge_user_document(uid: str, payload: UserDocumentPatch):
    patch = payload.to_patch()
    try:
        document = await repositories.merge_user_document(uid, patch)
    except Exception as exc:
        logger.exception("Failed to merge document %s: %s", uid, exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return document


@router.post("/v1/users/{uid}/profile")
async def ensure_profile(uid: str, payload: ProfileCreate):
    settings = get_settings()
    return await repositories.ensure_profile(
        uid,
        payload.email,
        payload.display_name,
        payload.photo_url,
        settings.super_admin_emails,
    )


@router.put("/v1/users/{uid}/role")
async def set_user_role(uid: str, payload: RolePayload):
    if payload.role not in USER_ROLES:
        raise HTTPException(status_code=400, detail="Unknown role")
    document = await repositories.set_user_role(uid, payload.role)
    if document is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"ok": True, "role": payload.role}
