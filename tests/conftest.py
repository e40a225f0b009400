"""
Pytest fixtures for the proposal generation service.
"""

import asyncio
import os

# Set environment before importing app modules so Settings picks it up.
os.environ["OPENAI_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["DEFAULT_PROVIDER"] = "openai"
os.environ["JWT_SECRET"] = "test-secret-key-1234"
os.environ["PROFILE_STORE_PATH"] = ""
os.environ["PROVIDER_TIMEOUT"] = "5"

import pytest
from fastapi.testclient import TestClient

from app.errors import Unauthenticated
from app.models.schemas import ModelPreference, UserInfo
from app.services.identity import issue_token
from app.services.profile_store import MemoryProfileStore
from app.services.providers import ProviderAdapter, UnavailableAdapter


class FakeAdapter(ProviderAdapter):
    """Adapter that returns canned outputs and records every call.

    Each entry in ``outputs`` is returned in turn; exceptions are raised
    instead of returned.
    """

    def __init__(self, name, outputs=None, delay=0.0):
        super().__init__(chars_per_token=4)
        self.name = name
        self.outputs = list(outputs or [])
        self.delay = delay
        self.calls = []

    async def generate(self, system, user, max_output_tokens):
        self.calls.append({"system": system, "user": user, "max_output_tokens": max_output_tokens})
        if self.delay:
            await asyncio.sleep(self.delay)
        result = self.outputs.pop(0) if self.outputs else "Generated text"
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def make_registry():
    """Build a registry with fake operational adapters and real unavailable ones."""

    def _make(openai_outputs=None, gemini_outputs=None, delay=0.0):
        return {
            ModelPreference.OPENAI: FakeAdapter(ModelPreference.OPENAI, openai_outputs, delay),
            ModelPreference.GEMINI: FakeAdapter(ModelPreference.GEMINI, gemini_outputs, delay),
            ModelPreference.CLAUDE: UnavailableAdapter(ModelPreference.CLAUDE),
            ModelPreference.GROK: UnavailableAdapter(ModelPreference.GROK),
        }

    return _make


@pytest.fixture
def identity_provider():
    def _verify(credential):
        if credential != "good-token":
            raise Unauthenticated("Invalid token")
        return "user-1"

    return _verify


@pytest.fixture
def profile_store():
    return MemoryProfileStore()


@pytest.fixture
def auth_headers():
    token = issue_token(UserInfo(id="user-1", email="demo@example.com"))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(make_registry, profile_store):
    """FastAPI test client with fake providers and an in-memory profile store."""
    from app.dependencies import get_profile_store, get_registry
    from app.main import app

    registry = make_registry(
        openai_outputs=["Hello from openai", "graph TB\nA-->B"],
        gemini_outputs=["Hello from gemini", "graph TB\nA-->B"],
    )
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_profile_store] = lambda: profile_store
    test_client = TestClient(app)
    test_client.registry = registry
    yield test_client
    app.dependency_overrides.clear()
