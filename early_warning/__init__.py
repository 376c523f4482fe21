"""
Early Warning - Request orchestration for the monitoring routes.

Usage:
    from early_warning import build_service

    service = build_service()
    result = await service.monitor_crisis(county="Turkana")
    await service.close()
"""

from .service import (
    EarlyWarningService,
    build_registry,
    build_service,
    parse_timeframe,
)


__all__ = [
    "EarlyWarningService",
    "build_registry",
    "build_service",
    "parse_timeframe",
]
