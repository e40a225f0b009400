from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt

from app.config import DEFAULT_JWT_SECRET, Settings, settings
from app.errors import Unauthenticated
from app.models.schemas import UserInfo

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "Bearer "


def extract_bearer(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith(TOKEN_PREFIX):
        return None
    token = authorization[len(TOKEN_PREFIX):].strip()
    return token or None


def issue_token(user: UserInfo, config: Settings = settings) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(minutes=config.jwt_expires_minutes),
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_token(token: str, config: Settings = settings) -> dict:
    try:
        return jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except jwt.ExpiredSignatureError as e:
        raise Unauthenticated("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise Unauthenticated("Invalid token") from e


def verify_credential(credential: str | None, config: Settings = settings) -> str:
    """Identity provider: bearer token in, stable subject id out."""
    if not credential:
        raise Unauthenticated("Authentication required")
    payload = decode_token(credential, config)
    subject = payload.get("sub")
    if not subject:
        raise Unauthenticated("Invalid token")
    return str(subject)


def authenticate_demo_user(email: str, password: str, config: Settings = settings) -> UserInfo:
    if email != config.demo_user_email or password != config.demo_user_password:
        raise Unauthenticated("Invalid credentials")
    return UserInfo(id=config.demo_user_id, email=config.demo_user_email)


def warn_on_default_secret(config: Settings = settings) -> None:
    if config.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is not set. Using default secret for development.")
