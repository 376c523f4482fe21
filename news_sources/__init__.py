"""
Document Retrieval Layer - Pluggable document sources.

This package provides:
- Parliament Hansard: debate records (JSON API)
- Kenya Gazette: official notices (JSON API)
- Static: in-memory or YAML fixtures for offline operation
- Registry for concurrent multi-source retrieval

Usage:
    from news_sources import DocumentRegistry, ParliamentHansardSource, GazetteNoticeSource

    registry = DocumentRegistry(source_timeout=15)
    registry.register(ParliamentHansardSource())
    registry.register(GazetteNoticeSource())

    documents = await registry.fetch_documents("political crisis kenya", limit=50)

Sources never raise. A failed or slow source contributes zero
documents and is recorded as an incident.
"""

from .base import BaseDocumentSource
from .exceptions import (
    DocumentSourceError,
    FetchError,
    ParseError,
    RateLimitError,
)
from .models import (
    DocumentRequest,
    SourceHealth,
    SourceIncident,
    SourceMetadata,
    SourceStatus,
)
from .providers import (
    GazetteNoticeSource,
    HttpDocumentSource,
    ParliamentHansardSource,
    StaticDocumentSource,
)
from .registry import DocumentRegistry


__all__ = [
    # Base
    "BaseDocumentSource",
    "HttpDocumentSource",

    # Providers
    "GazetteNoticeSource",
    "ParliamentHansardSource",
    "StaticDocumentSource",

    # Registry
    "DocumentRegistry",

    # Models
    "DocumentRequest",
    "SourceHealth",
    "SourceIncident",
    "SourceMetadata",
    "SourceStatus",

    # Exceptions
    "DocumentSourceError",
    "FetchError",
    "ParseError",
    "RateLimitError",
]
