"""
FastAPI integration module.

Provides helpers and utilities for integrating miraveja-glue with FastAPI.
"""

from .integration import (
    ScopedContainerMiddleware,
    create_fastapi_dependency,
    create_scoped_dependency,
)

__all__ = [
    "create_fastapi_dependency",
    "create_scoped_dependency",
    "ScopedContainerMiddleware",
]
