from typing import TYPE_CHECKING, Any, Generic, List, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from miraveja_glue.domain.enums import FrameKind
from miraveja_glue.domain.exceptions import CircularDependencyError

if TYPE_CHECKING:
    from miraveja_glue.domain.interfaces import IContainer

T = TypeVar("T")


class DefinitionContext(BaseModel):
    """Value object describing where a definition comes from.

    Attached to every node of the dependency graph and only used to build
    diagnostics.

    Attributes:
        path: The document the definition was read from.
        id: The parameter or service id the definition belongs to.
        definition: The serialised source of the definition.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path of the document holding the definition.")
    id: str = Field(..., description="Id of the parameter or service being defined.")
    definition: str = Field(..., description="Serialised text of the definition.")


class Frame(BaseModel):
    """A single request on the resolution stack."""

    model_config = ConfigDict(frozen=True)

    kind: FrameKind
    id: str

    def __str__(self) -> str:
        return f"{self.kind.value}({self.id})"


class Tag(BaseModel):
    """A service tag: a name plus arbitrary attributes.

    Example:
        >>> tag = Tag(name="listener", event="boot", priority=10)
        >>> tag.model_extra
        {'event': 'boot', 'priority': 10}
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = Field(..., description="Name the tag is queried by.")


class Call(BaseModel, Generic[T]):
    """A post-construction method call: the method name and its parameters."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: T
    params: List[T] = Field(default_factory=list)


class RunningContext(BaseModel):
    """Tracks the current dependency resolution stack.

    Used for circular dependency detection. The context is immutable: pushing a
    frame returns a new context, so sibling resolutions only share the frames of
    their common ancestors.

    Attributes:
        container: The container requests are resolved against.
        stack: Frames of the requests currently being resolved.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    container: "IContainer" = Field(..., description="Container resolving the requests.")
    stack: Tuple[Frame, ...] = Field(
        default_factory=tuple,
        description="Stack of requests currently being resolved.",
    )

    def has_frame(self, kind: FrameKind, frame_id: str) -> bool:
        return any(frame.kind == kind and frame.id == frame_id for frame in self.stack)

    def get_representation(self) -> str:
        """Render the stack as ``kind(id) -> kind(id) -> ...``."""
        return " -> ".join(str(frame) for frame in self.stack)

    def _push_frame(self, kind: FrameKind, frame_id: str) -> "RunningContext":
        """Return a new context with the request appended to the stack.

        Raises:
            CircularDependencyError: If the same request is already in the stack.
        """
        frame = Frame(kind=kind, id=frame_id)
        if self.has_frame(kind, frame_id):
            raise CircularDependencyError(list(self.stack) + [frame])
        return RunningContext(container=self.container, stack=self.stack + (frame,))

    def push_parameter_frame(self, parameter_id: str) -> "RunningContext":
        return self._push_frame(FrameKind.PARAMETER, parameter_id)

    def push_service_frame(self, service_id: str) -> "RunningContext":
        return self._push_frame(FrameKind.SERVICE, service_id)
