"""
Static Document Source - In-memory or YAML-backed documents.

Used for offline operation, fixtures and replaying captured
batches.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from risk_scoring.types import Document

from ..models import DocumentRequest, SourceMetadata, utcnow
from ..base import BaseDocumentSource
from .http import parse_timestamp


logger = logging.getLogger(__name__)


class StaticDocumentSource(BaseDocumentSource):
    """
    Serves a fixed document list.

    With match_query=True only documents containing at least
    one query term (case-insensitive) are returned.
    """

    def __init__(
        self,
        documents: Iterable[Document] = (),
        name: str = "static",
        match_query: bool = False,
    ) -> None:
        super().__init__(cache_ttl=1)
        self._documents = list(documents)
        self._name = name
        self._match_query = match_query

    @classmethod
    def from_yaml(cls, path: Path, name: Optional[str] = None) -> "StaticDocumentSource":
        """
        Load documents from a YAML file.

        Expected shape:
            documents:
              - source: nation.co.ke
                content: ...
                timestamp: 2024-06-25T10:00:00Z
        """
        import yaml

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        documents = []
        for item in data.get("documents", []):
            document = cls._from_mapping(item)
            if document:
                documents.append(document)
        logger.info(f"Loaded {len(documents)} static document(s) from {path}")
        return cls(documents, name=name or Path(path).stem)

    @staticmethod
    def _from_mapping(item: Any) -> Optional[Document]:
        if not isinstance(item, dict) or not item.get("content"):
            return None
        return Document(
            source=str(item.get("source") or "unknown"),
            content=str(item["content"]),
            timestamp=parse_timestamp(item.get("timestamp")) or utcnow(),
            title=str(item.get("title") or ""),
            url=item.get("url"),
        )

    @property
    def metadata(self) -> SourceMetadata:
        return SourceMetadata(
            name=self._name,
            display_name=f"Static ({self._name})",
        )

    async def _fetch_raw(
        self,
        request: DocumentRequest,
    ) -> list[dict[str, Any]]:
        terms = request.terms
        return [
            {"document": d}
            for d in self._documents
            if not (self._match_query and terms)
            or any(t in d.content.casefold() for t in terms)
        ]

    def _normalize(
        self,
        raw_data: dict[str, Any],
    ) -> Optional[Document]:
        return raw_data.get("document")
