"""
Application layer - Dependency graph, grammar and containers.

This layer contains the resolution engine orchestrating domain objects.
It depends only on the Domain layer.
"""

from .buildable import Alias, Buildable
from .container import AssemblingContainer, FallbackContainer
from .loader import Loader
from .processor import Processor
from .services import ConstructorService, FactoryService, PropertyService, RuntimeService, Service
from .values import (
    EnvBooleanValue,
    EnvNumberValue,
    EnvStringValue,
    EvalValue,
    LiteralValue,
    ParameterReference,
    ServiceReference,
    SymbolValue,
    TagListValue,
    TagObjectValue,
    Value,
)

__all__ = [
    # Graph
    "Buildable",
    "Alias",
    "Value",
    "EnvBooleanValue",
    "EnvNumberValue",
    "EnvStringValue",
    "EvalValue",
    "LiteralValue",
    "ParameterReference",
    "ServiceReference",
    "SymbolValue",
    "TagListValue",
    "TagObjectValue",
    "Service",
    "ConstructorService",
    "FactoryService",
    "PropertyService",
    "RuntimeService",
    # Containers
    "AssemblingContainer",
    "FallbackContainer",
    # Grammar
    "Processor",
    "Loader",
]
