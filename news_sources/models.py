"""
Document Source Models - Retrieval requests, health and incidents.

Retrieved items are normalized to risk_scoring.Document; this
module only holds the bookkeeping around retrieval.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional


# Consecutive failed fetches before a source is reported unavailable
UNAVAILABLE_AFTER_FAILURES = 3


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SourceStatus(Enum):
    """Health status of a document source."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


@dataclass
class SourceHealth:
    """Rolling health of one source, updated after every fetch."""
    status: SourceStatus = SourceStatus.UNKNOWN
    last_check: datetime = field(default_factory=utcnow)
    latency_ms: Optional[float] = None
    consecutive_failures: int = 0
    last_error: Optional[str] = None

    def record_success(self, latency_ms: float) -> None:
        self.status = SourceStatus.HEALTHY
        self.latency_ms = latency_ms
        self.consecutive_failures = 0

    def record_failure(self, error: Optional[BaseException]) -> None:
        self.consecutive_failures += 1
        self.last_error = str(error) if error else None
        if self.consecutive_failures >= UNAVAILABLE_AFTER_FAILURES:
            self.status = SourceStatus.UNAVAILABLE
        else:
            self.status = SourceStatus.DEGRADED


@dataclass(frozen=True)
class SourceMetadata:
    """Identity and request limits of a document source."""
    name: str
    display_name: str
    rate_limit_per_minute: Optional[int] = None
    rate_limit_per_day: Optional[int] = None


@dataclass
class DocumentRequest:
    """
    What to retrieve: free-text query, per-source limit and a
    look-back window ending now.
    """
    query: str = ""
    limit: int = 50
    time_range_hours: int = 24
    use_cache: bool = True

    def validate(self) -> None:
        if not 1 <= self.limit <= 500:
            raise ValueError("limit must be between 1 and 500")
        if not 1 <= self.time_range_hours <= 720:
            raise ValueError("time_range_hours must be between 1 and 720")

    @property
    def since(self) -> datetime:
        """Oldest publication time inside the window."""
        return utcnow() - timedelta(hours=self.time_range_hours)

    @property
    def terms(self) -> list[str]:
        """Case-folded query words."""
        return self.query.casefold().split()

    def cache_key(self, source_name: str) -> str:
        return f"{source_name}:{' '.join(self.terms)}:{self.time_range_hours}:{self.limit}"


@dataclass
class SourceIncident:
    """A failed or timed-out fetch, kept for the health endpoint."""
    source_name: str
    incident_type: str
    error_message: str
    query: str = ""
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_name": self.source_name,
            "incident_type": self.incident_type,
            "error_message": self.error_message,
            "query": self.query,
            "timestamp": self.timestamp.isoformat(),
        }
