"""Document source providers."""

from .gazette import GazetteNoticeSource
from .http import HttpDocumentSource
from .parliament import ParliamentHansardSource
from .static import StaticDocumentSource

__all__ = [
    "GazetteNoticeSource",
    "HttpDocumentSource",
    "ParliamentHansardSource",
    "StaticDocumentSource",
]
