"""
Parliament Hansard Source - Debate records from a Hansard JSON API.

Expected response shape:
    {"results": [{"title": ..., "summary": ..., "content": ...,
                  "house": "National Assembly", "sitting_date": ISO-8601,
                  "url": ...}]}

The endpoint is configurable (PARLIAMENT_API_URL) since the
official site only publishes PDFs; a mirror or internal
indexer is expected to serve the JSON.
"""

import logging
from typing import Any, Optional

from risk_scoring.types import Document

from ..models import DocumentRequest, SourceMetadata, utcnow
from .http import HttpDocumentSource, parse_timestamp


logger = logging.getLogger(__name__)


class ParliamentHansardSource(HttpDocumentSource):
    """
    Hansard debate records.

    Parliamentary statements carry political tension and
    governance signals (walkouts, impeachment motions,
    no-confidence votes).
    """

    DEFAULT_BASE_URL = "https://hansard.parliament.go.ke/api/v1"
    DEFAULT_CACHE_TTL = 900  # debates update slowly
    RATE_LIMIT_PER_MINUTE = 30

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        cache_ttl: Optional[int] = None,
        timeout: Optional[int] = None,
    ) -> None:
        super().__init__(base_url or self.DEFAULT_BASE_URL, api_key, cache_ttl, timeout)

    @property
    def metadata(self) -> SourceMetadata:
        return SourceMetadata(
            name="parliament_hansard",
            display_name="Parliament Hansard",
            rate_limit_per_minute=self.RATE_LIMIT_PER_MINUTE,
        )

    async def _fetch_raw(
        self,
        request: DocumentRequest,
    ) -> list[dict[str, Any]]:
        params = {"limit": str(request.limit)}
        if request.query:
            params["q"] = request.query

        data = await self._get_json("/sittings/search", params)
        items = data.get("results", []) if isinstance(data, dict) else []

        cutoff = request.since
        filtered = []
        for item in items:
            published = parse_timestamp(item.get("sitting_date"))
            # Keep undated records
            if published is None or published >= cutoff:
                filtered.append(item)
        return filtered[:request.limit]

    def _normalize(
        self,
        raw_data: dict[str, Any],
    ) -> Optional[Document]:
        title = (raw_data.get("title") or "").strip()
        body = (raw_data.get("content") or raw_data.get("summary") or "").strip()
        if not title and not body:
            return None

        house = raw_data.get("house") or "Parliament"
        return Document(
            source=f"parliament.go.ke/{house}",
            content=f"{title}. {body}" if title and body else title or body,
            timestamp=parse_timestamp(raw_data.get("sitting_date")) or utcnow(),
            title=title,
            url=raw_data.get("url"),
        )
