"""Application layer - Value nodes of the dependency graph."""

import asyncio
import inspect
import os
import re
from typing import Any, Dict, List, Optional

from miraveja_glue.application.buildable import Buildable
from miraveja_glue.domain import (
    DefinitionContext,
    DIException,
    IEvaluator,
    ISymbolImporter,
    RunningContext,
    SymbolFilter,
)

PLACEHOLDER_PATTERN = re.compile(r"(\\)?\$\{([^}]+)\}")
TRUTHY_VALUES = ("true", "1", "active", "yes")
DEFAULT_EXPORT = "default"


class Value(Buildable):
    """A node representing data rather than a constructed object."""


class ServiceReference(Value):
    """Resolves a service id from the active container."""

    def __init__(self, context: DefinitionContext, service_id: str) -> None:
        super().__init__(context)
        self.service_id = service_id

    async def assemble(self, context: RunningContext) -> Any:
        return await context.container.get(self.service_id, context)


class ParameterReference(Value):
    """Resolves a parameter id from the active container."""

    def __init__(self, context: DefinitionContext, parameter_id: str) -> None:
        super().__init__(context)
        self.parameter_id = parameter_id

    async def assemble(self, context: RunningContext) -> Any:
        return await context.container.get_parameter(self.parameter_id, context)


class LiteralValue(Value):
    """Plain data, possibly holding nested nodes.

    Lists and dicts are built element-wise, concurrently, preserving their shape
    and key order. Strings get their ``${name}`` placeholders replaced by the
    string form of the matching parameter; ``\\${name}`` is kept as ``${name}``.

    Example:
        >>> LiteralValue(context, "http://${host}:${port}/${host}")
        # resolves `host` and `port` once each
    """

    def __init__(self, context: DefinitionContext, value: Any) -> None:
        super().__init__(context)
        self.value = value

    async def _build_string(self, context: RunningContext, item: str) -> str:
        names: List[str] = []
        for match in PLACEHOLDER_PATTERN.finditer(item):
            escape, name = match.groups()
            if escape or name in names:
                continue
            names.append(name)

        values = await asyncio.gather(*(context.container.get_parameter(name, context) for name in names))
        parameters = {name: str(value) for name, value in zip(names, values)}

        def substitute(match: "re.Match[str]") -> str:
            if match.group(1):
                return match.group(0)[1:]
            return parameters[match.group(2)]

        return PLACEHOLDER_PATTERN.sub(substitute, item)

    async def _build_item(self, context: RunningContext, item: Any) -> Any:
        if isinstance(item, Buildable):
            return await item.build(context)

        if isinstance(item, (list, tuple)):
            return list(await asyncio.gather(*(self._build_item(context, element) for element in item)))

        if isinstance(item, dict):
            keys = list(item.keys())
            results = await asyncio.gather(*(self._build_item(context, element) for element in item.values()))
            return dict(zip(keys, results))

        if isinstance(item, str):
            return await self._build_string(context, item)

        return item

    async def assemble(self, context: RunningContext) -> Any:
        return await self._build_item(context, self.value)


def get_env_var(name: str, fallback: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, fallback)


def to_number(value: str) -> Any:
    try:
        return int(value)
    except ValueError:
        return float(value)


class EnvStringValue(Value):
    """Reads an environment variable as a string.

    Attributes:
        look_up: Function reading the variable; replaceable for tests.
    """

    look_up = staticmethod(get_env_var)

    def __init__(self, context: DefinitionContext, name: str, fallback: Optional[str] = None) -> None:
        super().__init__(context)
        self.name = name
        self.fallback = fallback

    async def assemble(self, context: RunningContext) -> Any:
        value = self.look_up(self.name, self.fallback)
        if value is None:
            raise DIException(f"Environment variable '{self.name}' not found", self.context)
        return value


class EnvBooleanValue(EnvStringValue):
    async def assemble(self, context: RunningContext) -> Any:
        value = await super().assemble(context)
        return value.lower() in TRUTHY_VALUES


class EnvNumberValue(EnvStringValue):
    async def assemble(self, context: RunningContext) -> Any:
        return to_number(await super().assemble(context))


class EvalValue(Value):
    """Evaluates inline code through an evaluator at resolution time."""

    def __init__(self, context: DefinitionContext, evaluator: IEvaluator, code: str) -> None:
        super().__init__(context)
        self.evaluator = evaluator
        self.code = code

    async def assemble(self, context: RunningContext) -> Any:
        result = self.evaluator.evaluate(self.code, context)
        if inspect.isawaitable(result):
            result = await result
        return result


class SymbolValue(Value):
    """Imports a module and selects one of its symbols.

    ``name`` selects what is returned:

    - ``None``: the module itself.
    - ``""``: the module's ``default`` attribute.
    - ``~``, ``~class``, ``~func``: the only public symbol, class or function.
    - anything else: the attribute with that name.
    """

    def __init__(
        self,
        context: DefinitionContext,
        importer: ISymbolImporter,
        path: str,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(context)
        self.importer = importer
        self.path = path
        self.name = name

    async def assemble(self, context: RunningContext) -> Any:
        module = self.importer.import_module(self.context.path, self.path)

        if self.name is None:
            return module

        if self.name == "":
            return getattr(module, DEFAULT_EXPORT)

        if self.name in {symbol_filter.value for symbol_filter in SymbolFilter}:
            return self.importer.resolve_exported_symbol(module, SymbolFilter(self.name), self.context)

        return getattr(module, self.name)


class TagObjectValue(Value):
    """Maps the ids of the services tagged with a name to their instances."""

    def __init__(self, context: DefinitionContext, name: str) -> None:
        super().__init__(context)
        self.name = name

    async def assemble(self, context: RunningContext) -> Any:
        container = context.container
        ids = container.find_service_ids_by_tag(self.name)
        services = await asyncio.gather(*(container.get(service_id, context) for service_id in ids))
        return dict(zip(ids, services))


class TagListValue(TagObjectValue):
    """Lists the instances of the services tagged with a name."""

    async def assemble(self, context: RunningContext) -> Any:
        services: Dict[str, Any] = await super().assemble(context)
        return list(services.values())
