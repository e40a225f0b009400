from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from app.errors import (
    DiagramGenerationFailed,
    GenerationFailed,
    InvalidRequest,
    ProfileUnavailable,
    UnsupportedProvider,
)
from app.models.schemas import (
    GenerateRequest,
    GenerationResult,
    ModelPreference,
    PersonalizationFacts,
    RawProfile,
)
from app.services.diagram import extract_diagram_source, wrap_diagram
from app.services.profile_sanitizer import sanitize
from app.services.profile_store import ProfileStore
from app.services.prompt_builder import build_diagram_prompt, build_proposal_prompt
from app.services.providers import ProviderAdapter, resolve_provider

logger = logging.getLogger(__name__)

IdentityProvider = Callable[[str | None], str]


def validate_request(payload: GenerateRequest | Mapping[str, Any]) -> GenerateRequest:
    if isinstance(payload, GenerateRequest):
        return payload
    try:
        return GenerateRequest.model_validate(payload)
    except ValidationError as e:
        raise InvalidRequest(
            "Invalid request data", details=e.errors(include_url=False, include_context=False)
        ) from e


async def fetch_raw_profile(
    store: ProfileStore, subject: str, timeout: float
) -> RawProfile | None:
    """Best-effort profile read. Any failure means "no profile"."""
    try:
        record = await asyncio.wait_for(store.get(subject), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Profile store timed out after %.1fs, continuing without profile", timeout)
        return None
    except ProfileUnavailable as e:
        logger.warning("Profile unavailable, continuing without profile: %s", e)
        return None
    except Exception:
        logger.warning("Error fetching user profile, continuing without profile", exc_info=True)
        return None

    if record is None:
        logger.info("No profile found for user")
        return None
    return RawProfile.from_record(record)


async def _call_adapter(
    adapter: ProviderAdapter,
    system: str,
    user: str,
    max_output_tokens: int,
    timeout: float,
) -> str:
    provider = adapter.name.value
    try:
        return await asyncio.wait_for(
            adapter.generate(system, user, max_output_tokens), timeout=timeout
        )
    except asyncio.TimeoutError as e:
        raise GenerationFailed(provider, f"timed out after {timeout:g}s") from e
    except (GenerationFailed, UnsupportedProvider):
        raise
    except Exception as e:
        raise GenerationFailed(provider, str(e) or type(e).__name__) from e


async def _generate_diagram(
    adapter: ProviderAdapter,
    job_description: str,
    max_output_tokens: int,
    timeout: float,
) -> str | None:
    """Diagram step. Failures are logged and turned into None, never raised."""
    try:
        prompt = build_diagram_prompt(job_description)
        try:
            raw = await _call_adapter(adapter, prompt.system, prompt.user, max_output_tokens, timeout)
        except (GenerationFailed, UnsupportedProvider) as e:
            raise DiagramGenerationFailed(adapter.name.value, e.message) from e
        if not extract_diagram_source(raw):
            raise DiagramGenerationFailed(adapter.name.value, "empty diagram")
        return wrap_diagram(raw)
    except DiagramGenerationFailed as e:
        logger.warning("%s; returning proposal without diagram", e.message)
    except Exception:
        logger.exception("Unexpected diagram error; returning proposal without diagram")
    return None


async def generate_proposal(
    payload: GenerateRequest | Mapping[str, Any],
    credential: str | None,
    *,
    identity_provider: IdentityProvider,
    profile_store: ProfileStore,
    registry: dict[ModelPreference, ProviderAdapter],
    default_provider: str | ModelPreference,
    provider_timeout: float = 60.0,
    profile_timeout: float = 5.0,
    diagram_max_tokens: int = 1024,
) -> GenerationResult:
    """Run one proposal request end to end.

    The proposal call is fatal on failure; the optional diagram call is not.
    Raises InvalidRequest, Unauthenticated, UnsupportedProvider or
    GenerationFailed.
    """
    logger.debug("state=Validating")
    request = validate_request(payload)

    logger.debug("state=Authenticating")
    subject = identity_provider(credential)
    logger.info("Generate request for user %s", subject)

    logger.debug("state=ProfileResolving")
    raw = await fetch_raw_profile(profile_store, subject, profile_timeout)
    facts: PersonalizationFacts | None = sanitize(raw) if raw is not None else None
    preference = raw.preferred_model if raw is not None else None
    adapter = resolve_provider(preference, registry, default_provider)
    provider = adapter.name.value
    logger.info("Using provider %s (profile used: %s)", provider, facts is not None)

    logger.debug("state=Prompting")
    prompt = build_proposal_prompt(request, facts)

    logger.debug("state=ProposalGenerating")
    proposal = await _call_adapter(
        adapter,
        prompt.system,
        prompt.user,
        adapter.token_budget(request.max_length),
        provider_timeout,
    )
    if not proposal or not proposal.strip():
        raise GenerationFailed(provider, "Generated proposal is empty")

    diagram = None
    if request.generate_diagram:
        logger.debug("state=DiagramGenerating")
        diagram = await _generate_diagram(
            adapter, request.job_description, diagram_max_tokens, provider_timeout
        )

    logger.debug("state=Completed")
    return GenerationResult(
        proposal=proposal,
        diagram=diagram,
        model_used=provider,
        profile_used=facts is not None,
    )
