"""Application layer - Service nodes of the dependency graph."""

import asyncio
import inspect
import logging
from abc import abstractmethod
from typing import Any, Awaitable, Callable, List, Optional, Union

from miraveja_glue.application.buildable import Buildable
from miraveja_glue.domain import Call, DefinitionContext, RunningContext, Tag

logger = logging.getLogger(__name__)

RUNTIME_CONTEXT = DefinitionContext(path="<runtime>", id="<runtime>", definition="<runtime>")

Builder = Callable[[RunningContext], Union[Any, Awaitable[Any]]]


class Service(Buildable):
    """A node constructing an object and running calls on it.

    Subclasses only decide how the raw instance is obtained. Once it exists,
    every call is issued concurrently: there is no ordering between calls, and
    each call resolves its own parameters concurrently too.

    Attributes:
        scope: Partition key of the service, if any.
        tags: Tags attached to the service, in declaration order.
        calls: Method calls to run on the freshly created instance.
    """

    def __init__(
        self,
        context: DefinitionContext,
        scope: Optional[str] = None,
        tags: Optional[List[Tag]] = None,
        calls: Optional[List[Call]] = None,
    ) -> None:
        super().__init__(context)
        self.scope = scope
        self.tags: List[Tag] = list(tags or [])
        self.calls: List[Call] = list(calls or [])

    @abstractmethod
    async def instantiate(self, context: RunningContext) -> Any:
        """Create the raw instance of the service."""

    async def _invoke(self, instance: Any, call: Call, context: RunningContext) -> None:
        method = await call.method.build(context)
        params = await asyncio.gather(*(param.build(context) for param in call.params))
        result = getattr(instance, method)(*params)
        if inspect.isawaitable(result):
            await result

    async def assemble(self, context: RunningContext) -> Any:
        instance = await self.instantiate(context)
        logger.debug("Instantiated `%s` defined in `%s`", self.context.id, self.context.path)

        await asyncio.gather(*(self._invoke(instance, call, context) for call in self.calls))
        return instance

    def get_tags_by_name(self, name: str) -> List[Tag]:
        return [tag for tag in self.tags if tag.name == name]


class ConstructorService(Service):
    """Calls ``symbol(*args)``."""

    def __init__(
        self,
        symbol: Buildable,
        args: List[Buildable],
        context: DefinitionContext,
        scope: Optional[str] = None,
        tags: Optional[List[Tag]] = None,
        calls: Optional[List[Call]] = None,
    ) -> None:
        super().__init__(context, scope, tags, calls)
        self.symbol = symbol
        self.args = args

    async def instantiate(self, context: RunningContext) -> Any:
        symbol = await self.symbol.build(context)
        args = await asyncio.gather(*(arg.build(context) for arg in self.args))
        return symbol(*args)


class FactoryService(Service):
    """Calls ``symbol.<factory>(*args)``, awaiting the result when needed."""

    def __init__(
        self,
        symbol: Buildable,
        factory: Buildable,
        args: List[Buildable],
        context: DefinitionContext,
        scope: Optional[str] = None,
        tags: Optional[List[Tag]] = None,
        calls: Optional[List[Call]] = None,
    ) -> None:
        super().__init__(context, scope, tags, calls)
        self.symbol = symbol
        self.factory = factory
        self.args = args

    async def instantiate(self, context: RunningContext) -> Any:
        symbol = await self.symbol.build(context)
        factory = await self.factory.build(context)
        args = await asyncio.gather(*(arg.build(context) for arg in self.args))

        result = getattr(symbol, factory)(*args)
        if inspect.isawaitable(result):
            result = await result
        return result


class PropertyService(Service):
    """Reads ``symbol.<property>``."""

    def __init__(
        self,
        symbol: Buildable,
        property_name: Buildable,
        context: DefinitionContext,
        scope: Optional[str] = None,
        tags: Optional[List[Tag]] = None,
        calls: Optional[List[Call]] = None,
    ) -> None:
        super().__init__(context, scope, tags, calls)
        self.symbol = symbol
        self.property_name = property_name

    async def instantiate(self, context: RunningContext) -> Any:
        symbol = await self.symbol.build(context)
        property_name = await self.property_name.build(context)
        return getattr(symbol, property_name)


class RuntimeService(Service):
    """A service created by a Python callable instead of a declarative definition.

    The builder receives the running context, so it can resolve other services
    through ``context.container``.

    Example:
        >>> loader.add_service(
        ...     "clock",
        ...     RuntimeService(lambda context: SystemClock(), tags=[Tag(name="infra")]),
        ... )
    """

    def __init__(
        self,
        builder: Builder,
        scope: Optional[str] = None,
        tags: Optional[List[Tag]] = None,
        calls: Optional[List[Call]] = None,
    ) -> None:
        super().__init__(RUNTIME_CONTEXT, scope, tags, calls)
        self.builder = builder

    async def instantiate(self, context: RunningContext) -> Any:
        result = self.builder(context)
        if inspect.isawaitable(result):
            result = await result
        return result
