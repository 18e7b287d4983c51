import logging
from typing import Any, Dict, Hashable, List, Optional

from miraveja_glue.application.buildable import Alias, Buildable
from miraveja_glue.application.container import AssemblingContainer, FallbackContainer
from miraveja_glue.application.processor import Processor
from miraveja_glue.application.services import ConstructorService, FactoryService, PropertyService, Service
from miraveja_glue.application.values import (
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
from miraveja_glue.domain import (
    AliasNotFoundError,
    Call,
    DefinitionContext,
    IContainer,
    IEvaluator,
    ISymbolImporter,
    ParameterNotFoundError,
    ServiceNotFoundError,
    Tag,
)

logger = logging.getLogger(__name__)


class Loader(Processor[Buildable]):
    """Registry of parsed definitions producing scoped containers.

    Parameters and aliases are shared by every scope; services are partitioned
    by their ``scope``. Services without a scope land in the loader's default
    scope, which is a private token unless a name is given, so two loaders never
    share an implicit default scope.

    Containers are snapshots: definitions added after ``get_container`` are not
    seen by containers created before.

    Attributes:
        _default_scope: Scope of the services that do not declare one.
        _parameters: Parameter definitions by id.
        _aliases: Alias definitions by id.
        _services: Service definitions by id, grouped by scope.
        _importer: Capability resolving symbol references.
        _evaluator: Capability evaluating inline code.
    """

    def __init__(
        self,
        importer: ISymbolImporter,
        evaluator: IEvaluator,
        default_scope: Optional[str] = None,
    ) -> None:
        """Initialize the loader with empty tables.

        Args:
            importer: Capability resolving ``(path)name`` references.
            evaluator: Capability evaluating ``!code`` values.
            default_scope: Name of the default scope. A private token when omitted.
        """
        self._default_scope: Hashable = default_scope if default_scope is not None else object()
        self._parameters: Dict[str, Value] = {}
        self._aliases: Dict[str, Alias] = {}
        self._services: Dict[Hashable, Dict[str, Service]] = {}
        self._importer = importer
        self._evaluator = evaluator

    def add_extend(self, path: str) -> None:
        self.from_path(path)

    # Parameters

    def add_parameter(self, parameter_id: str, parameter: Value) -> None:
        self._parameters[parameter_id] = parameter

    def has_parameter(self, parameter_id: str) -> bool:
        return parameter_id in self._parameters

    def get_parameter(self, parameter_id: str) -> Value:
        if parameter_id in self._parameters:
            return self._parameters[parameter_id]
        raise ParameterNotFoundError(parameter_id)

    def get_all_parameters(self) -> List[str]:
        return list(self._parameters)

    def remove_parameter(self, parameter_id: str) -> None:
        self._parameters.pop(parameter_id, None)

    # Aliases

    def add_alias(self, alias_id: str, alias: Alias) -> None:
        self._aliases[alias_id] = alias

    def has_alias(self, alias_id: str) -> bool:
        return alias_id in self._aliases

    def get_alias(self, alias_id: str) -> Alias:
        if alias_id in self._aliases:
            return self._aliases[alias_id]
        raise AliasNotFoundError(alias_id)

    def get_all_aliases(self) -> List[str]:
        return list(self._aliases)

    def remove_alias(self, alias_id: str) -> None:
        self._aliases.pop(alias_id, None)

    # Services

    def add_service(self, service_id: str, service: Service) -> None:
        """Register a service in its scope, replacing any previous definition.

        Args:
            service_id: The id the service is requested by.
            service: The service definition.
        """
        self.remove_service(service_id)

        scope = service.scope if service.scope is not None else self._default_scope
        self._services.setdefault(scope, {})[service_id] = service
        logger.debug("Registered service `%s` in scope %r", service_id, scope)

    def has_service(self, service_id: str) -> bool:
        return any(service_id in services for services in self._services.values())

    def get_service(self, service_id: str) -> Service:
        for services in self._services.values():
            if service_id in services:
                return services[service_id]
        raise ServiceNotFoundError(service_id)

    def get_all_services(self) -> List[str]:
        return [service_id for services in self._services.values() for service_id in services]

    def remove_service(self, service_id: str) -> None:
        for services in self._services.values():
            services.pop(service_id, None)

    # Producers

    def process_env_str_value(self, context: DefinitionContext, name: str, fallback: Optional[str]) -> Buildable:
        return EnvStringValue(context, name, fallback)

    def process_env_bool_value(self, context: DefinitionContext, name: str, fallback: Optional[str]) -> Buildable:
        return EnvBooleanValue(context, name, fallback)

    def process_env_num_value(self, context: DefinitionContext, name: str, fallback: Optional[str]) -> Buildable:
        return EnvNumberValue(context, name, fallback)

    def process_eval_value(self, context: DefinitionContext, code: str) -> Buildable:
        return EvalValue(context, self._evaluator, code)

    def process_literal_value(self, context: DefinitionContext, value: Any) -> Buildable:
        return LiteralValue(context, value)

    def process_parameter_value(self, context: DefinitionContext, parameter_id: str) -> Buildable:
        return ParameterReference(context, parameter_id)

    def process_service_value(self, context: DefinitionContext, service_id: str) -> Buildable:
        return ServiceReference(context, service_id)

    def process_symbol_value(self, context: DefinitionContext, path: str, name: Optional[str]) -> Buildable:
        return SymbolValue(context, self._importer, path, name)

    def process_tag_list_value(self, context: DefinitionContext, name: str) -> Buildable:
        return TagListValue(context, name)

    def process_tag_object_value(self, context: DefinitionContext, name: str) -> Buildable:
        return TagObjectValue(context, name)

    def process_alias(self, context: DefinitionContext, aliased: str) -> Buildable:
        return Alias(context, aliased)

    def process_constructor_service(
        self,
        context: DefinitionContext,
        symbol: Buildable,
        args: List[Buildable],
        scope: Optional[str],
        tags: List[Tag],
        calls: List[Call],
    ) -> Buildable:
        return ConstructorService(symbol, args, context, scope, tags, calls)

    def process_factory_service(
        self,
        context: DefinitionContext,
        symbol: Buildable,
        factory: Buildable,
        args: List[Buildable],
        scope: Optional[str],
        tags: List[Tag],
        calls: List[Call],
    ) -> Buildable:
        return FactoryService(symbol, factory, args, context, scope, tags, calls)

    def process_property_service(
        self,
        context: DefinitionContext,
        symbol: Buildable,
        property_name: Buildable,
        scope: Optional[str],
        tags: List[Tag],
        calls: List[Call],
    ) -> Buildable:
        return PropertyService(symbol, property_name, context, scope, tags, calls)

    # Containers

    def get_container(self, scope: Optional[str] = None, parent: Optional[IContainer] = None) -> IContainer:
        """Create a container for one scope.

        Args:
            scope: The scope to build services from. The default scope when omitted.
            parent: Container to fall back to for anything this scope lacks.

        Returns:
            An ``AssemblingContainer``, wrapped in a ``FallbackContainer`` when a
            parent is given.

        Example:
            >>> app = loader.get_container()
            >>> request = loader.get_container("request", parent=app)
            >>> await request.get("session")  # request scope first, then the default one
        """
        container_scope = scope if scope is not None else self._default_scope
        container = AssemblingContainer(
            self._parameters,
            self._aliases,
            self._services.get(container_scope, {}),
        )

        if parent is not None:
            return FallbackContainer(container, parent)
        return container
