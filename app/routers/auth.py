from __future__ import annotations

import logging

from fastapi import APIRouter, Header

from app.errors import Unauthenticated
from app.models.schemas import LoginRequest, LoginResponse
from app.services.identity import (
    authenticate_demo_user,
    decode_token,
    extract_bearer,
    issue_token,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth")


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest):
    user = authenticate_demo_user(request.email, request.password)
    logger.info("Issued token for user %s", user.id)
    return LoginResponse(token=issue_token(user), user=user)


@router.get("/verify")
async def verify(authorization: str | None = Header(default=None)):
    token = extract_bearer(authorization)
    if token is None:
        raise Unauthenticated("No token provided")
    payload = decode_token(token)
    return {
        "valid": True,
        "user": {
            "id": payload.get("sub"),
            "email": payload.get("email"),
            "role": payload.get("role"),
        },
    }
