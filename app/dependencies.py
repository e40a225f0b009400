from __future__ import annotations

from functools import lru_cache

from app.config import settings
from app.models.schemas import ModelPreference
from app.services.identity import verify_credential
from app.services.orchestrator import IdentityProvider
from app.services.profile_store import ProfileStore, create_profile_store
from app.services.providers import ProviderAdapter, build_registry


@lru_cache
def get_profile_store() -> ProfileStore:
    return create_profile_store(settings.profile_store_path)


def get_registry() -> dict[ModelPreference, ProviderAdapter]:
    return build_registry(settings)


def get_identity_provider() -> IdentityProvider:
    return verify_credential
