from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Header

from app.config import settings
from app.dependencies import get_identity_provider, get_profile_store, get_registry
from app.models.schemas import ErrorResponse, GenerationResult
from app.services.identity import extract_bearer
from app.services.orchestrator import generate_proposal

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/api/generate",
    response_model=GenerationResult,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        501: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def generate(
    payload: dict[str, Any] = Body(...),
    authorization: str | None = Header(default=None),
    identity_provider=Depends(get_identity_provider),
    profile_store=Depends(get_profile_store),
    registry=Depends(get_registry),
):
    # Body is validated by the orchestrator so it happens before authentication
    return await generate_proposal(
        payload,
        extract_bearer(authorization),
        identity_provider=identity_provider,
        profile_store=profile_store,
        registry=registry,
        default_provider=settings.default_provider,
        provider_timeout=settings.provider_timeout,
        profile_timeout=settings.profile_timeout,
        diagram_max_tokens=settings.diagram_max_tokens,
    )
