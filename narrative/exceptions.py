"""
Narrative Exceptions - Text generation error hierarchy.

Raised by generators and caught by the summarizer, verifier and
counter-narrative generator, which degrade to deterministic
output instead of propagating.
"""

from typing import Optional


class NarrativeError(Exception):
    """Base exception for narrative enrichment errors."""

    def __init__(self, message: str, provider: str = "") -> None:
        super().__init__(message)
        self.provider = provider


class GenerationError(NarrativeError):
    """The provider call failed (network error or non-2xx status)."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, provider)
        self.status_code = status_code


class MalformedResponseError(NarrativeError):
    """The provider answered but the body is unusable."""
