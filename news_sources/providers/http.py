"""
HTTP JSON Source - Shared aiohttp plumbing for JSON API providers.

Maps transport failures onto the source error hierarchy so the
base retry loop can classify them:
- 429 -> RateLimitError (not retried)
- other non-2xx, network errors -> FetchError
- undecodable body -> ParseError (not retried)
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import aiohttp

from ..base import BaseDocumentSource
from ..exceptions import FetchError, ParseError, RateLimitError


logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix allowed) to aware UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class HttpDocumentSource(BaseDocumentSource):
    """Base for sources backed by a JSON-over-HTTP endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        cache_ttl: Optional[int] = None,
        timeout: Optional[int] = None,
    ) -> None:
        super().__init__(api_key, cache_ttl, timeout)
        self.base_url = base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            headers = {"Accept": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._session = aiohttp.ClientSession(timeout=timeout, headers=headers)
        return self._session

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        session = await self._get_session()
        url = f"{self.base_url}{path}"

        try:
            async with session.get(url, params=params) as response:
                if response.status == 429:
                    retry_after = response.headers.get("Retry-After", "60")
                    raise RateLimitError(
                        f"{self.metadata.display_name} rate limit exceeded",
                        source_name=self.metadata.name,
                        retry_after_seconds=int(retry_after) if retry_after.isdigit() else None,
                    )

                if response.status != 200:
                    raise FetchError(
                        f"{self.metadata.display_name} API error: {response.status}",
                        source_name=self.metadata.name,
                        status_code=response.status,
                    )

                text = await response.text()
        except aiohttp.ClientError as e:
            raise FetchError(
                f"Network error: {e}",
                source_name=self.metadata.name,
            ) from e

        try:
            return json.loads(text)
        except ValueError as e:
            raise ParseError(
                f"Invalid JSON from {self.metadata.display_name}",
                source_name=self.metadata.name,
            ) from e

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
