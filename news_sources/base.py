"""
Base Document Source - Contract for retrieval adapters.

A source turns a DocumentRequest into Documents. Whatever goes
wrong upstream, it answers with what it has: a fresh batch, a
recent stale batch, or nothing. A failing source contributes
zero documents; it never fails the monitoring request.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from risk_scoring.types import Document

from .exceptions import DocumentSourceError, RateLimitError
from .models import (
    DocumentRequest,
    SourceHealth,
    SourceMetadata,
    SourceStatus,
    utcnow,
)


logger = logging.getLogger(__name__)


@dataclass
class CachedBatch:
    """Documents from one successful fetch."""
    documents: list[Document]
    fetched_at: datetime

    def age_seconds(self, now: datetime) -> float:
        return (now - self.fetched_at).total_seconds()


class RequestBudget:
    """
    Outbound request allowance for one source.

    A sliding one-minute window, a UTC-day counter and an
    optional pause set from an upstream Retry-After.
    """

    def __init__(self, per_minute: Optional[int] = None, per_day: Optional[int] = None) -> None:
        self.per_minute = per_minute
        self.per_day = per_day
        self.used_today = 0
        self._day = utcnow().date()
        self._recent: deque[datetime] = deque()
        self._paused_until: Optional[datetime] = None

    def available(self, now: datetime) -> bool:
        if self._paused_until and now < self._paused_until:
            return False

        if now.date() != self._day:
            self._day = now.date()
            self.used_today = 0
        if self.per_day and self.used_today >= self.per_day:
            return False

        cutoff = now - timedelta(minutes=1)
        while self._recent and self._recent[0] <= cutoff:
            self._recent.popleft()
        return not (self.per_minute and len(self._recent) >= self.per_minute)

    def spend(self, now: datetime) -> None:
        self._recent.append(now)
        self.used_today += 1

    def pause(self, seconds: int) -> None:
        self._paused_until = utcnow() + timedelta(seconds=seconds)


class BaseDocumentSource(ABC):
    """
    Abstract base class for document sources.

    Subclasses implement:
    - metadata: name and request limits
    - _fetch_raw(): raw items for a request; raises
      DocumentSourceError subclasses on failure
    - _normalize(): one raw item to a Document, None to drop it

    fetch_documents() never raises.
    """

    DEFAULT_CACHE_TTL = 300  # 5 minutes
    STALE_TTL = 3600  # stale batches served for up to an hour
    DEFAULT_TIMEOUT = 10
    MAX_RETRIES = 2
    RETRY_DELAY = 1.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        cache_ttl: Optional[int] = None,
        timeout: Optional[int] = None,
    ) -> None:
        self.api_key = api_key
        self.cache_ttl = cache_ttl or self.DEFAULT_CACHE_TTL
        self.timeout = timeout or self.DEFAULT_TIMEOUT

        self._batches: dict[str, CachedBatch] = {}
        self._budget: Optional[RequestBudget] = None
        self._health = SourceHealth()

        self._stats = {
            "total_requests": 0,
            "cache_hits": 0,
            "errors": 0,
            "rate_limits_hit": 0,
            "successful_fetches": 0,
        }

    @property
    @abstractmethod
    def metadata(self) -> SourceMetadata:
        """Return source metadata."""

    @abstractmethod
    async def _fetch_raw(self, request: DocumentRequest) -> list[dict[str, Any]]:
        """Fetch raw items for the request."""

    @abstractmethod
    def _normalize(self, raw_data: dict[str, Any]) -> Optional[Document]:
        """Normalize one raw item. Returns None if it is unusable."""

    @property
    def budget(self) -> RequestBudget:
        # Built on first use; metadata may depend on subclass state
        if self._budget is None:
            self._budget = RequestBudget(
                self.metadata.rate_limit_per_minute,
                self.metadata.rate_limit_per_day,
            )
        return self._budget

    # ---- public API

    async def fetch_documents(self, request: Optional[DocumentRequest] = None) -> list[Document]:
        """
        Fetch normalized documents for a request.

        Order of preference: fresh cache, live fetch, stale
        cache, empty list.
        """
        request = request or DocumentRequest()
        name = self.metadata.name

        try:
            request.validate()
        except ValueError as e:
            logger.warning(f"[{name}] Invalid request: {e}")
            return []

        self._stats["total_requests"] += 1
        key = request.cache_key(name)
        now = utcnow()
        cached = self._batches.get(key)

        if request.use_cache and cached and cached.age_seconds(now) <= self.cache_ttl:
            self._stats["cache_hits"] += 1
            return list(cached.documents)

        if not self.budget.available(now):
            logger.warning(f"[{name}] Request budget exhausted")
            self._stats["rate_limits_hit"] += 1
            self._health.status = SourceStatus.RATE_LIMITED
            return self._stale(cached, now)

        documents = await self._fetch_with_retry(request)
        if documents:
            self._store(key, documents)
            self._stats["successful_fetches"] += 1
            return documents

        stale = self._stale(cached, now)
        if stale:
            logger.info(f"[{name}] Serving {len(stale)} stale document(s)")
        return stale

    async def get_health(self) -> SourceHealth:
        self._health.last_check = utcnow()
        return self._health

    def get_stats(self) -> dict[str, Any]:
        return {**self._stats, "source_name": self.metadata.name}

    async def close(self) -> None:
        """Release network resources. Override if needed."""

    # ---- internals

    async def _fetch_with_retry(self, request: DocumentRequest) -> list[Document]:
        """Fetch with linear back-off; non-retryable errors stop at once."""
        name = self.metadata.name
        started = utcnow()
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.MAX_RETRIES + 2):
            try:
                self.budget.spend(utcnow())
                raw_items = await self._fetch_raw(request)
            except DocumentSourceError as e:
                last_error = e
                if not e.retryable:
                    logger.warning(f"[{name}] {type(e).__name__}, not retrying: {e}")
                    break
                logger.warning(f"[{name}] Fetch failed (attempt {attempt}): {e}")
            except Exception as e:
                last_error = e
                logger.error(f"[{name}] Unexpected error (attempt {attempt}): {e}")
            else:
                documents = self._normalize_all(raw_items)
                latency_ms = (utcnow() - started).total_seconds() * 1000
                self._health.record_success(latency_ms)
                return documents[:request.limit]

            if attempt <= self.MAX_RETRIES:
                await asyncio.sleep(self.RETRY_DELAY * attempt)

        self._record_failure(last_error)
        return []

    def _record_failure(self, error: Optional[BaseException]) -> None:
        if isinstance(error, RateLimitError):
            self._stats["rate_limits_hit"] += 1
            self._health.status = SourceStatus.RATE_LIMITED
            if error.retry_after_seconds:
                self.budget.pause(error.retry_after_seconds)
            return

        self._stats["errors"] += 1
        self._health.record_failure(error)

    def _normalize_all(self, raw_items: Optional[list[dict[str, Any]]]) -> list[Document]:
        documents: list[Document] = []
        for item in raw_items or []:
            try:
                document = self._normalize(item)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"[{self.metadata.name}] Dropping malformed item: {e}")
                continue
            if document is not None:
                documents.append(document)
        return documents

    def _stale(self, cached: Optional[CachedBatch], now: datetime) -> list[Document]:
        if cached and cached.age_seconds(now) <= self.STALE_TTL:
            return list(cached.documents)
        return []

    def _store(self, key: str, documents: list[Document]) -> None:
        now = utcnow()
        self._batches = {
            k: batch for k, batch in self._batches.items()
            if batch.age_seconds(now) <= self.STALE_TTL
        }
        self._batches[key] = CachedBatch(list(documents), now)
