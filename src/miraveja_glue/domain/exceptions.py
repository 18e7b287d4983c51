from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from miraveja_glue.domain.models import DefinitionContext, Frame, RunningContext


class DIException(Exception):
    """Base exception for DI-related errors.

    When a definition context is provided, the message is extended with the
    location and the source of the definition being processed.

    Attributes:
        context: Definition that was being processed when the error happened.
    """

    def __init__(self, message: str = "", context: Optional["DefinitionContext"] = None) -> None:
        self.context = context
        parts = [message]
        if context is not None:
            parts.append(
                f"This issue originated while processing `{context.id}` defined in `{context.path}`:\n"
                f"{context.definition}"
            )
        super().__init__("\n\n".join(parts))


def _chain_of_requests(running_context: Optional["RunningContext"]) -> str:
    if running_context is None:
        return ""
    representation = running_context.get_representation()
    if not representation:
        return ""
    return f" Chain of requests:\n{representation}"


class CircularDependencyError(DIException):
    """Raised when a circular dependency is detected.

    Attributes:
        dependency_chain: Frames involved in the cycle, the repeated frame last.
    """

    def __init__(self, dependency_chain: List["Frame"]) -> None:
        self.dependency_chain = dependency_chain
        super().__init__(f"Circular dependency detected: {' -> '.join(str(frame) for frame in dependency_chain)}")


class ServiceNotFoundError(DIException):
    """Raised when a service id is not defined in a container.

    Attributes:
        service_id: The requested service id.
    """

    def __init__(self, service_id: str, running_context: Optional["RunningContext"] = None) -> None:
        self.service_id = service_id
        super().__init__(f"Service definition `{service_id}` was not found.{_chain_of_requests(running_context)}")


class ParameterNotFoundError(DIException):
    """Raised when a parameter id is not defined in a container.

    Attributes:
        parameter_id: The requested parameter id.
    """

    def __init__(self, parameter_id: str, running_context: Optional["RunningContext"] = None) -> None:
        self.parameter_id = parameter_id
        super().__init__(f"Parameter definition `{parameter_id}` was not found.{_chain_of_requests(running_context)}")


class AliasNotFoundError(DIException):
    """Raised when an alias id is not registered in a loader."""

    def __init__(self, alias_id: str) -> None:
        self.alias_id = alias_id
        super().__init__(f"Alias definition `{alias_id}` was not found.")


class UnknownServiceTypeError(DIException):
    """Raised when a service declares both `factory` and `property`."""

    def __init__(self, context: "DefinitionContext") -> None:
        super().__init__("Unable to determine service type.", context)


class SerialiseError(DIException):
    """Raised when definition data cannot be serialised into its document format."""

    def __init__(self, data_format: str, path: str) -> None:
        self.data_format = data_format
        self.path = path
        super().__init__(f"Unable to serialise {data_format} data in {path}")


class DeserialiseError(DIException):
    """Raised when a document cannot be deserialised from its format."""

    def __init__(self, data_format: str, path: str) -> None:
        self.data_format = data_format
        self.path = path
        super().__init__(f"Unable to deserialise {data_format} data in {path}")


class AggregatedError(DIException):
    """Raised when every container of a federation failed to resolve a request.

    Attributes:
        errors: The underlying errors, in container order.
    """

    def __init__(self, errors: List[Exception]) -> None:
        self.errors = errors
        messages = "\n\n".join(
            "\n".join(f"  {line}" for line in str(error).split("\n")) for error in errors
        )
        super().__init__(f"This is an aggregated error triggered by the following ones:\n\n{messages}")


class AssemblyError(DIException):
    """Wraps an unexpected exception raised while assembling a definition.

    Attributes:
        original: The exception raised by user code or by the host runtime.
    """

    def __init__(self, original: BaseException, context: Optional["DefinitionContext"] = None) -> None:
        self.original = original
        super().__init__(
            f"Unable to continue due to the following error:\n{type(original).__name__}: {original}",
            context,
        )
