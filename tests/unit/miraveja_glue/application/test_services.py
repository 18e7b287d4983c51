"""Unit tests for service nodes."""

import asyncio

import pytest

from miraveja_glue.application import AssemblingContainer
from miraveja_glue.application.services import (
    ConstructorService,
    FactoryService,
    PropertyService,
    RuntimeService,
)
from miraveja_glue.application.values import LiteralValue, ParameterReference
from miraveja_glue.domain import AssemblyError, Call, DefinitionContext, RunningContext, Tag


@pytest.fixture
def definition_context():
    return DefinitionContext(path="/app/services.yaml", id="service", definition="symbol: ...")


def literal(value):
    return LiteralValue(DefinitionContext(path="/app/services.yaml", id="literal", definition=repr(value)), value)


def running_context(parameters=None, services=None):
    return RunningContext(container=AssemblingContainer(parameters or {}, {}, services or {}))


class Greeter:
    def __init__(self, greeting="Hello", name="world"):
        self.greeting = greeting
        self.name = name
        self.calls = []

    def greet(self):
        return f"{self.greeting}, {self.name}!"

    def record(self, *args):
        self.calls.append(args)

    async def record_later(self, value):
        await asyncio.sleep(0)
        self.calls.append(("later", value))

    @classmethod
    def create(cls, name):
        return cls("Hi", name)

    @classmethod
    async def create_async(cls, name):
        await asyncio.sleep(0)
        return cls("Hey", name)

    DEFAULT_NAME = "friend"


class TestConstructorService:
    """Test cases for ConstructorService."""

    @pytest.mark.asyncio
    async def test_constructor_calls_symbol_with_args(self, definition_context):
        """Test that the symbol is called with the built arguments."""
        service = ConstructorService(literal(Greeter), [literal("Hola"), literal("mundo")], definition_context)

        instance = await service.build(running_context())

        assert isinstance(instance, Greeter)
        assert instance.greet() == "Hola, mundo!"

    @pytest.mark.asyncio
    async def test_constructor_arguments_can_be_references(self, definition_context):
        """Test that arguments are resolved through the container."""
        service = ConstructorService(
            literal(Greeter),
            [literal("Hi"), ParameterReference(definition_context, "name")],
            definition_context,
        )

        instance = await service.build(running_context(parameters={"name": literal("Ada")}))

        assert instance.greet() == "Hi, Ada!"

    @pytest.mark.asyncio
    async def test_constructor_errors_are_wrapped(self, definition_context):
        """Test that errors raised by the constructor carry the definition."""
        service = ConstructorService(literal(Greeter), [literal(1), literal(2), literal(3)], definition_context)

        with pytest.raises(AssemblyError) as exc_info:
            await service.build(running_context())

        assert isinstance(exc_info.value.original, TypeError)
        assert exc_info.value.context is definition_context


class TestFactoryService:
    """Test cases for FactoryService."""

    @pytest.mark.asyncio
    async def test_factory_calls_method(self, definition_context):
        """Test that the factory method is called with the arguments."""
        service = FactoryService(literal(Greeter), literal("create"), [literal("Bob")], definition_context)

        instance = await service.build(running_context())

        assert instance.greet() == "Hi, Bob!"

    @pytest.mark.asyncio
    async def test_factory_awaits_coroutines(self, definition_context):
        """Test that asynchronous factories are awaited."""
        service = FactoryService(literal(Greeter), literal("create_async"), [literal("Eve")], definition_context)

        instance = await service.build(running_context())

        assert instance.greet() == "Hey, Eve!"


class TestPropertyService:
    """Test cases for PropertyService."""

    @pytest.mark.asyncio
    async def test_property_reads_attribute(self, definition_context):
        """Test that the attribute is returned."""
        service = PropertyService(literal(Greeter), literal("DEFAULT_NAME"), definition_context)

        assert await service.build(running_context()) == "friend"


class TestRuntimeService:
    """Test cases for RuntimeService."""

    @pytest.mark.asyncio
    async def test_runtime_calls_builder_with_context(self):
        """Test that the builder receives the running context."""
        received = []
        service = RuntimeService(lambda context: received.append(context) or "built")
        context = running_context()

        assert await service.build(context) == "built"
        assert received == [context]

    @pytest.mark.asyncio
    async def test_runtime_awaits_async_builders(self):
        """Test that async builders are awaited."""

        async def builder(context):
            return await context.container.get_parameter("name")

        service = RuntimeService(builder)

        assert await service.build(running_context(parameters={"name": literal("Ada")})) == "Ada"

    def test_runtime_context(self):
        """Test that runtime services have a placeholder provenance."""
        service = RuntimeService(lambda context: None, scope="request")

        assert service.context.path == "<runtime>"
        assert service.scope == "request"


class TestServiceCalls:
    """Test cases for post-construction calls."""

    @pytest.mark.asyncio
    async def test_calls_are_invoked_on_instance(self, definition_context):
        """Test that each call is invoked with its parameters."""
        service = ConstructorService(
            literal(Greeter),
            [],
            definition_context,
            calls=[
                Call(method=literal("record"), params=[literal(1), literal(2)]),
                Call(method=literal("record"), params=[]),
            ],
        )

        instance = await service.build(running_context())

        assert sorted(instance.calls, key=len) == [(), (1, 2)]

    @pytest.mark.asyncio
    async def test_async_calls_are_awaited(self, definition_context):
        """Test that coroutine methods are awaited before the instance is returned."""
        service = ConstructorService(
            literal(Greeter),
            [],
            definition_context,
            calls=[Call(method=literal("record_later"), params=[ParameterReference(definition_context, "v")])],
        )

        instance = await service.build(running_context(parameters={"v": literal(7)}))

        assert instance.calls == [("later", 7)]

    @pytest.mark.asyncio
    async def test_unknown_method_fails(self, definition_context):
        """Test that calling an unknown method fails with the service context."""
        service = ConstructorService(
            literal(Greeter),
            [],
            definition_context,
            calls=[Call(method=literal("missing"), params=[])],
        )

        with pytest.raises(AssemblyError) as exc_info:
            await service.build(running_context())

        assert isinstance(exc_info.value.original, AttributeError)
        assert exc_info.value.context is definition_context


class TestServiceTags:
    """Test cases for service tags."""

    def test_get_tags_by_name(self, definition_context):
        """Test that tags are filtered by name."""
        tags = [Tag(name="web", priority=1), Tag(name="cli"), Tag(name="web", priority=2)]
        service = ConstructorService(literal(Greeter), [], definition_context, tags=tags)

        assert service.get_tags_by_name("web") == [tags[0], tags[2]]
        assert service.get_tags_by_name("unknown") == []
