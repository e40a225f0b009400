from __future__ import annotations

from typing import Any


class ProposalForgeError(Exception):
    """Base class for failures that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidRequest(ProposalForgeError):
    status_code = 400


class Unauthenticated(ProposalForgeError):
    status_code = 401


class UnsupportedProvider(ProposalForgeError):
    status_code = 501

    def __init__(self, provider: str):
        super().__init__(f"{provider} integration coming soon")
        self.provider = provider


class GenerationFailed(ProposalForgeError):
    status_code = 502

    def __init__(self, provider: str, cause: str):
        super().__init__(f"Failed to generate content with {provider}: {cause}")
        self.provider = provider
        self.cause = cause


class ProfileUnavailable(ProposalForgeError):
    """Profile store could not be read.

    Recovered as "no profile" on reads. Only a profile write can surface it.
    """

    status_code = 503


class DiagramGenerationFailed(ProposalForgeError):
    """Diagram step failed. Always recovered by omitting the diagram."""

    def __init__(self, provider: str, cause: str):
        super().__init__(f"Diagram generation with {provider} failed: {cause}")
        self.provider = provider
        self.cause = cause
