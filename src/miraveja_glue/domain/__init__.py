"""
Domain layer - Core models, errors and contracts.

This layer contains the value objects and interfaces of the dependency graph.
It has no dependencies on other layers.
"""

from .enums import EnvType, FrameKind, SymbolFilter
from .exceptions import (
    AggregatedError,
    AliasNotFoundError,
    AssemblyError,
    CircularDependencyError,
    DeserialiseError,
    DIException,
    ParameterNotFoundError,
    SerialiseError,
    ServiceNotFoundError,
    UnknownServiceTypeError,
)
from .interfaces import IContainer, IEvaluator, ISymbolImporter
from .models import Call, DefinitionContext, Frame, RunningContext, Tag

# Rebuild Pydantic models to resolve forward references
RunningContext.model_rebuild()

__all__ = [
    # Enums
    "EnvType",
    "FrameKind",
    "SymbolFilter",
    # Exceptions
    "DIException",
    "AggregatedError",
    "AliasNotFoundError",
    "AssemblyError",
    "CircularDependencyError",
    "DeserialiseError",
    "ParameterNotFoundError",
    "SerialiseError",
    "ServiceNotFoundError",
    "UnknownServiceTypeError",
    # Interfaces
    "IContainer",
    "IEvaluator",
    "ISymbolImporter",
    # Models
    "Call",
    "DefinitionContext",
    "Frame",
    "RunningContext",
    "Tag",
]
