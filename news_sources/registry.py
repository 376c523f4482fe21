"""
Document Registry - Concurrent retrieval across all sources.

One query fans out to every registered source at once. Each
source gets the same time budget; whatever arrives inside it is
concatenated in registration order. Late or failing sources are
recorded as incidents and contribute nothing.
"""

import asyncio
import logging
from collections import deque
from typing import Any, Optional

from risk_scoring.types import Document

from .base import BaseDocumentSource
from .models import DocumentRequest, SourceIncident, SourceStatus


logger = logging.getLogger(__name__)


MAX_INCIDENTS = 100


class DocumentRegistry:
    """
    Registry of document sources keyed by metadata name.

    Usage:
        registry = DocumentRegistry(source_timeout=15)
        registry.register(ParliamentHansardSource())
        registry.register(GazetteNoticeSource())

        documents = await registry.fetch_documents("political crisis kenya")
    """

    DEFAULT_SOURCE_TIMEOUT = 15.0  # seconds

    def __init__(self, source_timeout: Optional[float] = None) -> None:
        self.source_timeout = source_timeout or self.DEFAULT_SOURCE_TIMEOUT
        self._sources: dict[str, BaseDocumentSource] = {}
        self._incidents: deque[SourceIncident] = deque(maxlen=MAX_INCIDENTS)

        self._stats = {
            "total_requests": 0,
            "complete_fetches": 0,
            "partial_fetches": 0,
            "failed_fetches": 0,
        }

    def register(self, source: BaseDocumentSource) -> None:
        name = source.metadata.name
        if name in self._sources:
            logger.warning(f"Replacing document source: {name}")
        self._sources[name] = source
        logger.info(f"Registered document source: {name}")

    def unregister(self, name: str) -> bool:
        if self._sources.pop(name, None) is None:
            return False
        logger.info(f"Unregistered document source: {name}")
        return True

    @property
    def source_names(self) -> list[str]:
        return list(self._sources)

    async def fetch_documents(
        self,
        query: str = "",
        limit: int = 50,
        time_range_hours: int = 24,
    ) -> list[Document]:
        """
        Fetch documents from every registered source.

        Never raises and never waits longer than source_timeout.

        Args:
            query: Free-text query passed to every source
            limit: Max documents per source
            time_range_hours: How far back to look

        Returns:
            Documents from every source that answered in time
        """
        self._stats["total_requests"] += 1

        if not self._sources:
            logger.warning("No document sources registered")
            return []

        request = DocumentRequest(query=query, limit=limit, time_range_hours=time_range_hours)
        batches = await asyncio.gather(*(
            self._fetch_bounded(name, source, request)
            for name, source in self._sources.items()
        ))

        answered = sum(1 for batch in batches if batch)
        if answered == len(batches):
            self._stats["complete_fetches"] += 1
        elif answered:
            self._stats["partial_fetches"] += 1
        else:
            self._stats["failed_fetches"] += 1

        documents = [document for batch in batches for document in batch]
        logger.info(
            f"Fetched {len(documents)} document(s) from {answered}/{len(batches)} source(s)"
        )
        return documents

    async def _fetch_bounded(
        self,
        name: str,
        source: BaseDocumentSource,
        request: DocumentRequest,
    ) -> list[Document]:
        try:
            return await asyncio.wait_for(source.fetch_documents(request), timeout=self.source_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Source {name} timed out after {self.source_timeout}s")
            self._incidents.append(SourceIncident(name, "timeout", "source timed out", request.query))
        except Exception as e:
            logger.error(f"Source {name} error: {e}")
            self._incidents.append(SourceIncident(name, "fetch_error", str(e), request.query))
        return []

    async def get_health_summary(self) -> dict[str, Any]:
        """Per-source status plus counts by status."""
        statuses = {
            name: (await source.get_health()).status
            for name, source in self._sources.items()
        }
        total = len(statuses)
        healthy = sum(1 for s in statuses.values() if s == SourceStatus.HEALTHY)

        return {
            "total_sources": total,
            "healthy": healthy,
            "degraded": sum(1 for s in statuses.values() if s == SourceStatus.DEGRADED),
            "unavailable": sum(1 for s in statuses.values() if s == SourceStatus.UNAVAILABLE),
            "health_pct": round(healthy / total * 100, 1) if total else 0,
            "sources": {name: s.value for name, s in statuses.items()},
        }

    def get_stats(self) -> dict[str, Any]:
        return {
            **self._stats,
            "source_names": self.source_names,
            "source_stats": {n: s.get_stats() for n, s in self._sources.items()},
            "recent_incidents": len(self._incidents),
        }

    def get_incidents(self, limit: int = 20, source_name: Optional[str] = None) -> list[dict[str, Any]]:
        """Most recent incidents, oldest first."""
        incidents = [i for i in self._incidents if source_name is None or i.source_name == source_name]
        return [i.to_dict() for i in incidents[-limit:]]

    async def close(self) -> None:
        for source in self._sources.values():
            await source.close()
        self._sources.clear()
