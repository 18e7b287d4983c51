from enum import Enum


class FrameKind(str, Enum):
    """Kind of request recorded on a resolution stack.

    Attributes:
        PARAMETER: A parameter lookup.
        SERVICE: A service (or alias) lookup.
    """

    PARAMETER = "parameter"
    SERVICE = "service"

    def __str__(self) -> str:
        return self.value


class EnvType(str, Enum):
    """Coercion applied to an environment variable value.

    Attributes:
        STRING: Raw string value.
        BOOLEAN: ``true``, ``1``, ``active`` or ``yes`` (case-insensitive) are truthy.
        NUMBER: Integer when possible, float otherwise.
    """

    STRING = "s"
    BOOLEAN = "b"
    NUMBER = "n"

    def __str__(self) -> str:
        return self.value


class SymbolFilter(str, Enum):
    """Selectors for the only symbol exported by a module."""

    ANY = "~"
    CLASS = "~class"
    FUNCTION = "~func"

    def __str__(self) -> str:
        return self.value
