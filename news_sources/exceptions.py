"""
Document Source Exceptions.

Raised inside a source's _fetch_raw() and consumed by the base
retry loop; fetch_documents() never lets them reach the caller.

Each error says whether another attempt can help. A timeout or
a 5xx may clear up; a quota answer or an undecodable 200 will
not change on retry.
"""

from typing import Optional


class DocumentSourceError(Exception):
    """Base exception for document retrieval failures."""

    retryable = True

    def __init__(self, message: str, source_name: str = "") -> None:
        super().__init__(message)
        self.source_name = source_name


class FetchError(DocumentSourceError):
    """Upstream unreachable or answered with an error status."""

    def __init__(
        self,
        message: str,
        source_name: str = "",
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, source_name)
        self.status_code = status_code


class RateLimitError(DocumentSourceError):
    """Upstream quota exhausted; the source pauses instead of retrying."""

    retryable = False

    def __init__(
        self,
        message: str,
        source_name: str = "",
        retry_after_seconds: Optional[int] = None,
    ) -> None:
        super().__init__(message, source_name)
        self.retry_after_seconds = retry_after_seconds


class ParseError(DocumentSourceError):
    """Upstream answered, but the body is not a usable payload."""

    retryable = False
