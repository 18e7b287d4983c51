"""Application layer - Base node of the dependency graph."""

from abc import ABC, abstractmethod
from typing import Any

from miraveja_glue.domain import AssemblyError, DefinitionContext, DIException, RunningContext


class Buildable(ABC):
    """A lazily evaluated node producing one value given a running context.

    Attributes:
        context: Provenance of the definition the node was parsed from.
    """

    def __init__(self, context: DefinitionContext) -> None:
        self.context = context

    @abstractmethod
    async def assemble(self, context: RunningContext) -> Any:
        """Produce the value of the node."""

    async def build(self, context: RunningContext) -> Any:
        """Produce the value of the node, attaching provenance to unexpected errors.

        Errors raised by the framework already carry their diagnostics and are
        propagated untouched, so a failure is only wrapped once, at the deepest
        node where it happened.

        Args:
            context: Running context of the current resolution.

        Returns:
            The assembled value.

        Raises:
            AssemblyError: If assembling raised an exception foreign to the framework.
        """
        try:
            return await self.assemble(context)
        except DIException:
            raise
        except Exception as e:
            raise AssemblyError(e, self.context) from e


class Alias(Buildable):
    """Delegates to another service id of the active container."""

    def __init__(self, context: DefinitionContext, aliased: str) -> None:
        super().__init__(context)
        self.aliased = aliased

    async def assemble(self, context: RunningContext) -> Any:
        return await context.container.get(self.aliased, context)
