from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header

from app.dependencies import get_identity_provider, get_profile_store
from app.errors import ProfileUnavailable
from app.models.schemas import ProfileUpdate
from app.services.identity import extract_bearer

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/profile")


@router.get("")
async def read_profile(
    authorization: str | None = Header(default=None),
    identity_provider=Depends(get_identity_provider),
    profile_store=Depends(get_profile_store),
):
    subject = identity_provider(extract_bearer(authorization))
    try:
        record = await profile_store.get(subject)
    except ProfileUnavailable as e:
        logger.warning("Profile unavailable for user %s: %s", subject, e)
        return {}
    return record or {}


@router.put("")
async def update_profile(
    profile: ProfileUpdate,
    authorization: str | None = Header(default=None),
    identity_provider=Depends(get_identity_provider),
    profile_store=Depends(get_profile_store),
):
    subject = identity_provider(extract_bearer(authorization))
    record = profile.to_record()
    await profile_store.put(subject, record)
    return record
