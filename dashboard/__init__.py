"""
Dashboard Package.

This package provides the HTTP surface of the monitors.

Modules:
- api: FastAPI application factory (create_app)
- schemas: Request and response models
"""

from .api import create_app

__all__ = ["create_app"]
