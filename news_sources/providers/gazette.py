"""
Gazette Notice Source - Official notices from a Kenya Gazette JSON API.

Expected response shape:
    {"notices": [{"notice_number": ..., "title": ..., "body": ...,
                  "published_at": ISO-8601, "url": ...}]}

Gazette notices cover security operations, curfews, state
appointments and procurement awards.
"""

import logging
from typing import Any, Optional

from risk_scoring.types import Document

from ..models import DocumentRequest, SourceMetadata, utcnow
from .http import HttpDocumentSource, parse_timestamp


logger = logging.getLogger(__name__)


class GazetteNoticeSource(HttpDocumentSource):
    """Kenya Gazette notices."""

    DEFAULT_BASE_URL = "https://gazette.kenyalaw.org/api/v1"
    DEFAULT_CACHE_TTL = 1800
    RATE_LIMIT_PER_MINUTE = 20
    RATE_LIMIT_PER_DAY = 2000

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
            name="kenya_gazette",
            display_name="Kenya Gazette",
            rate_limit_per_minute=self.RATE_LIMIT_PER_MINUTE,
            rate_limit_per_day=self.RATE_LIMIT_PER_DAY,
        )

    async def _fetch_raw(
        self,
        request: DocumentRequest,
    ) -> list[dict[str, Any]]:
        params = {
            "limit": str(request.limit),
            "since": request.since.isoformat(),
        }
        if request.query:
            params["search"] = request.query

        data = await self._get_json("/notices", params)
        if not isinstance(data, dict):
            return []
        return list(data.get("notices", []))[:request.limit]

    def _normalize(
        self,
        raw_data: dict[str, Any],
    ) -> Optional[Document]:
        try:
            title = str(raw_data.get("title") or "").strip()
            body = str(raw_data.get("body") or "").strip()
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to normalize gazette notice: {e}")
            return None
        if not body:
            return None

        number = raw_data.get("notice_number")
        return Document(
            source="kenyalaw.org/gazette",
            content=f"{title}. {body}" if title else body,
            timestamp=parse_timestamp(raw_data.get("published_at")) or utcnow(),
            title=f"Gazette Notice {number}: {title}" if number else title,
            url=raw_data.get("url"),
        )
