import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Mapping, Optional, Set

from miraveja_glue.application.buildable import Alias
from miraveja_glue.application.services import Service
from miraveja_glue.application.values import Value
from miraveja_glue.domain import (
    AggregatedError,
    CircularDependencyError,
    Frame,
    FrameKind,
    IContainer,
    ParameterNotFoundError,
    RunningContext,
    ServiceNotFoundError,
)

logger = logging.getLogger(__name__)


def _nearest_service(context: RunningContext) -> Optional[str]:
    for frame in reversed(context.stack):
        if frame.kind == FrameKind.SERVICE:
            return frame.id
    return None


class AssemblingContainer(IContainer):
    """Container building services from their definitions.

    Each service is built at most once per container: the pending build is
    stored before it is awaited, so concurrent requests for the same id share
    one instantiation. Parameters are rebuilt on every request.

    Attributes:
        _parameters: Parameter definitions by id.
        _aliases: Alias definitions by id.
        _services: Service definitions by id.
        _instances: Pending or finished builds by service id.
        _waits: Ids each in-flight request is waiting on, by requesting service id.
    """

    def __init__(
        self,
        parameters: Mapping[str, Value],
        aliases: Mapping[str, Alias],
        services: Mapping[str, Service],
    ) -> None:
        """Initialize the container with its definition tables.

        Args:
            parameters: Parameter definitions by id.
            aliases: Alias definitions by id.
            services: Service definitions by id, in registration order.
        """
        self._parameters: Dict[str, Value] = dict(parameters)
        self._aliases: Dict[str, Alias] = dict(aliases)
        self._services: Dict[str, Service] = dict(services)
        self._instances: Dict[str, "asyncio.Future[Any]"] = {}
        self._waits: Dict[str, List[str]] = {}

    async def get(self, service_id: str, context: Optional[RunningContext] = None) -> Any:
        """Resolve and return the instance of a service.

        Aliases delegate to the aliased id and are not memoized under their own id.

        Args:
            service_id: The service (or alias) id to resolve.
            context: Running context of the enclosing resolution, if any.

        Returns:
            The instance of the service.

        Raises:
            ServiceNotFoundError: If the id is neither a service nor an alias.
            CircularDependencyError: If the id is already being resolved, either
                by this request or by a build this request is waiting on.

        Example:
            >>> container = loader.get_container()
            >>> mailer = await container.get("mailer")
        """
        parent_context = context if context is not None else RunningContext(container=self)
        running_context = parent_context.push_service_frame(service_id)

        instance = self._instances.get(service_id)
        if instance is not None and instance.done():
            return instance.result()

        self._check_waits(running_context)

        if instance is not None:
            pending: Awaitable[Any] = instance
        elif service_id in self._aliases:
            pending = self._aliases[service_id].build(running_context)
        elif service_id in self._services:
            logger.debug("Building service `%s`", service_id)
            self._instances[service_id] = asyncio.ensure_future(self._services[service_id].build(running_context))
            pending = self._instances[service_id]
        else:
            raise ServiceNotFoundError(service_id, running_context)

        waiter = _nearest_service(parent_context)
        if waiter is None:
            return await pending

        self._waits.setdefault(waiter, []).append(service_id)
        try:
            return await pending
        finally:
            self._waits[waiter].remove(service_id)
            if not self._waits[waiter]:
                del self._waits[waiter]

    def _check_waits(self, context: RunningContext) -> None:
        """Fail when a build this request waits on is itself waiting on the request.

        Siblings reaching the same cycle from different ends each find the
        other's build in flight, so the cycle is not visible on either stack.
        """
        *ancestors, requested = context.stack
        targets = {frame.id for frame in ancestors if frame.kind == FrameKind.SERVICE}
        path = self._find_wait_path(requested.id, targets, set())
        if path is not None:
            chain = list(context.stack) + [Frame(kind=FrameKind.SERVICE, id=frame_id) for frame_id in path]
            raise CircularDependencyError(chain)

    def _find_wait_path(self, service_id: str, targets: Set[str], visited: Set[str]) -> Optional[List[str]]:
        visited.add(service_id)
        for awaited in self._waits.get(service_id, []):
            if awaited in targets:
                return [awaited]
            if awaited not in visited:
                path = self._find_wait_path(awaited, targets, visited)
                if path is not None:
                    return [awaited] + path
        return None

    async def get_parameter(self, parameter_id: str, context: Optional[RunningContext] = None) -> Any:
        """Resolve and return the value of a parameter.

        Args:
            parameter_id: The parameter id to resolve.
            context: Running context of the enclosing resolution, if any.

        Raises:
            ParameterNotFoundError: If the parameter is not defined.
            CircularDependencyError: If the parameter is already being resolved.
        """
        running_context = (context if context is not None else RunningContext(container=self)).push_parameter_frame(
            parameter_id
        )

        if parameter_id in self._parameters:
            return await self._parameters[parameter_id].build(running_context)

        raise ParameterNotFoundError(parameter_id, running_context)

    def find_service_ids_by_tag(self, tag: str) -> List[str]:
        return [service_id for service_id, service in self._services.items() if service.get_tags_by_name(tag)]

    @classmethod
    def from_services(cls, services: Mapping[str, Service]) -> "AssemblingContainer":
        """Create a container holding only services."""
        return cls({}, {}, services)


class FallbackContainer(IContainer):
    """Federates several containers, asking each of them in order.

    Only "not found" errors make the request fall through to the next
    container; any other error is propagated straight away. When a request
    starts here, the running context points at this container, so the
    dependencies of a service are resolved through the whole federation.

    Example:
        >>> overrides = test_loader.get_container()
        >>> container = FallbackContainer(overrides, production_loader.get_container())
        >>> await container.get("mailer")  # test definition first, production otherwise
    """

    def __init__(self, *containers: IContainer) -> None:
        self._containers = containers

    @property
    def containers(self) -> List[IContainer]:
        return list(self._containers)

    async def get(self, service_id: str, context: Optional[RunningContext] = None) -> Any:
        running_context = context if context is not None else RunningContext(container=self)
        errors: List[Exception] = []

        for container in self._containers:
            try:
                return await container.get(service_id, running_context)
            except ServiceNotFoundError as e:
                logger.debug("Service `%s` not found in %r, falling back", service_id, container)
                errors.append(e)

        raise AggregatedError(errors)

    async def get_parameter(self, parameter_id: str, context: Optional[RunningContext] = None) -> Any:
        running_context = context if context is not None else RunningContext(container=self)
        errors: List[Exception] = []

        for container in self._containers:
            try:
                return await container.get_parameter(parameter_id, running_context)
            except ParameterNotFoundError as e:
                logger.debug("Parameter `%s` not found in %r, falling back", parameter_id, container)
                errors.append(e)

        raise AggregatedError(errors)

    def find_service_ids_by_tag(self, tag: str) -> List[str]:
        ids: Dict[str, None] = {}
        for container in self._containers:
            for service_id in container.find_service_ids_by_tag(tag):
                ids.setdefault(service_id)
        return list(ids)
