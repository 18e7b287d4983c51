"""
miraveja-glue: Declarative dependency injection with an asynchronous resolution engine.

Public API exports for the miraveja-glue package.
"""

# Application exports
from miraveja_glue.application import (
    AssemblingContainer,
    FallbackContainer,
    Loader,
    RuntimeService,
)

# Domain exports
from miraveja_glue.domain import (
    AggregatedError,
    AliasNotFoundError,
    AssemblyError,
    CircularDependencyError,
    DefinitionContext,
    DeserialiseError,
    DIException,
    IContainer,
    ParameterNotFoundError,
    RunningContext,
    SerialiseError,
    ServiceNotFoundError,
    Tag,
    UnknownServiceTypeError,
)

# Infrastructure exports
from miraveja_glue.infrastructure import JsonLoader, YamlLoader

__version__ = "0.1.0"

__all__ = [
    # Containers
    "IContainer",
    "AssemblingContainer",
    "FallbackContainer",
    # Loaders
    "Loader",
    "YamlLoader",
    "JsonLoader",
    # Graph
    "RuntimeService",
    "DefinitionContext",
    "RunningContext",
    "Tag",
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
]
