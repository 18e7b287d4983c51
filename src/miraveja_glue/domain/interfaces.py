from abc import ABC, abstractmethod
from types import ModuleType
from typing import Any, List, Optional

from miraveja_glue.domain.enums import SymbolFilter
from miraveja_glue.domain.models import DefinitionContext, RunningContext


class IContainer(ABC):
    """Abstract interface for dependency injection container operations."""

    @abstractmethod
    async def get(self, service_id: str, context: Optional[RunningContext] = None) -> Any:
        """Resolve and return the instance of a service.

        Args:
            service_id: The service (or alias) id to resolve.
            context: Running context of the enclosing resolution, if any.

        Raises:
            ServiceNotFoundError: If the service is not defined.
            CircularDependencyError: If the request is already being resolved.
        """

    @abstractmethod
    async def get_parameter(self, parameter_id: str, context: Optional[RunningContext] = None) -> Any:
        """Resolve and return the value of a parameter.

        Args:
            parameter_id: The parameter id to resolve.
            context: Running context of the enclosing resolution, if any.

        Raises:
            ParameterNotFoundError: If the parameter is not defined.
            CircularDependencyError: If the request is already being resolved.
        """

    @abstractmethod
    def find_service_ids_by_tag(self, tag: str) -> List[str]:
        """Return the ids of the services carrying a tag with the given name.

        Args:
            tag: The tag name to look for.
        """


class IEvaluator(ABC):
    """Abstract capability evaluating inline code found in definitions."""

    @abstractmethod
    def evaluate(self, code: str, context: RunningContext) -> Any:
        """Evaluate a piece of code and return its value.

        The returned value may be awaitable, in which case it is awaited by the caller.

        Args:
            code: The source text to evaluate.
            context: Running context of the resolution requesting the value.
        """


class ISymbolImporter(ABC):
    """Abstract capability resolving symbol references to host objects."""

    @abstractmethod
    def import_module(self, base_path: str, path: str) -> ModuleType:
        """Import a module.

        Args:
            base_path: Path of the document the reference was written in.
            path: Dotted module name, or file path relative to ``base_path``.
        """

    @abstractmethod
    def resolve_exported_symbol(
        self,
        module: ModuleType,
        symbol_filter: SymbolFilter,
        context: DefinitionContext,
    ) -> Any:
        """Return the only symbol exported by a module that matches a filter.

        Args:
            module: The module to look into.
            symbol_filter: Kind of symbol being looked for.
            context: Definition requesting the symbol, used for diagnostics.

        Raises:
            DIException: If no symbol or more than one symbol matches.
        """
