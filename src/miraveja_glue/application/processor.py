"""Application layer - Grammar turning declarative definitions into a graph."""

import inspect
import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

from miraveja_glue.domain import (
    Call,
    DefinitionContext,
    DIException,
    EnvType,
    Tag,
    UnknownServiceTypeError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SYMBOL_PATTERN = re.compile(r"^\(([^)]+)(?:\)(.*))?$", re.DOTALL)
GLOB_PATTERN = re.compile(r"^\[([^\]]+)(?:\](.*))?$", re.DOTALL)


def _check_id(path: str, definition_id: Any) -> None:
    if not isinstance(definition_id, str):
        raise DIException(f"Definition ids in the path `{path}` must be strings, got `{definition_id!r}`")


def is_first_char(value: str, char: str) -> bool:
    """Tell whether a string starts with a sigil.

    A doubled sigil (``<<foo``) escapes it, and a lone sigil is plain text.
    """
    return len(value) > 1 and value[0] == char and value[1] != char


class Processor(ABC, Generic[T]):
    """Parses declarative definitions into nodes of type ``T``.

    The grammar is shared by every backend: subclasses only provide the
    collaborators (filesystem and document format) and one ``process_*``
    producer per grammar production.
    """

    # Collaborators

    @abstractmethod
    def glob(self, pattern: str) -> List[str]:
        """Return the paths matching a pattern."""

    @abstractmethod
    def get_full_path(self, base_file: str, relative: str, should_exist: bool = True) -> str:
        """Resolve a path relative to the directory of another file."""

    @abstractmethod
    def read_contents(self, path: str) -> str:
        """Return the text of a document."""

    @abstractmethod
    def serialise(self, path: str, data: Any) -> str:
        """Serialise definition data into the document format."""

    @abstractmethod
    def deserialise(self, path: str, data: str) -> Any:
        """Deserialise a document."""

    # Registry

    @abstractmethod
    def add_extend(self, path: str) -> None:
        """Handle a document listed in an ``extends`` section."""

    @abstractmethod
    def add_parameter(self, parameter_id: str, parameter: T) -> None:
        """Register a parameter."""

    @abstractmethod
    def add_alias(self, alias_id: str, alias: T) -> None:
        """Register an alias."""

    @abstractmethod
    def add_service(self, service_id: str, service: T) -> None:
        """Register a service."""

    # Producers

    @abstractmethod
    def process_env_str_value(self, context: DefinitionContext, name: str, fallback: Optional[str]) -> T: ...

    @abstractmethod
    def process_env_bool_value(self, context: DefinitionContext, name: str, fallback: Optional[str]) -> T: ...

    @abstractmethod
    def process_env_num_value(self, context: DefinitionContext, name: str, fallback: Optional[str]) -> T: ...

    @abstractmethod
    def process_eval_value(self, context: DefinitionContext, code: str) -> T: ...

    @abstractmethod
    def process_literal_value(self, context: DefinitionContext, value: Any) -> T: ...

    @abstractmethod
    def process_parameter_value(self, context: DefinitionContext, parameter_id: str) -> T: ...

    @abstractmethod
    def process_service_value(self, context: DefinitionContext, service_id: str) -> T: ...

    @abstractmethod
    def process_symbol_value(self, context: DefinitionContext, path: str, name: Optional[str]) -> T: ...

    @abstractmethod
    def process_tag_list_value(self, context: DefinitionContext, name: str) -> T: ...

    @abstractmethod
    def process_tag_object_value(self, context: DefinitionContext, name: str) -> T: ...

    @abstractmethod
    def process_alias(self, context: DefinitionContext, aliased: str) -> T: ...

    @abstractmethod
    def process_constructor_service(
        self,
        context: DefinitionContext,
        symbol: T,
        args: List[T],
        scope: Optional[str],
        tags: List[Tag],
        calls: List[Call],
    ) -> T: ...

    @abstractmethod
    def process_factory_service(
        self,
        context: DefinitionContext,
        symbol: T,
        factory: T,
        args: List[T],
        scope: Optional[str],
        tags: List[Tag],
        calls: List[Call],
    ) -> T: ...

    @abstractmethod
    def process_property_service(
        self,
        context: DefinitionContext,
        symbol: T,
        property_name: T,
        scope: Optional[str],
        tags: List[Tag],
        calls: List[Call],
    ) -> T: ...

    # Documents

    def from_paths(self, pattern: str, base_path: Optional[str] = None) -> None:
        """Load every document matching a glob pattern.

        Relative patterns are resolved against ``base_path`` or, when omitted,
        against the file of the caller.

        Example:
            >>> loader.from_paths("config/**/*.yaml")
        """
        full_pattern = pattern
        if not os.path.isabs(pattern):
            if base_path is None:
                base_path = inspect.stack()[1].filename
            full_pattern = self.get_full_path(base_path, pattern, False)

        for path in self.glob(full_pattern):
            self.from_path(path)

    def from_path(self, path: str) -> None:
        logger.debug("Loading definitions from `%s`", path)
        self.from_content(path, self.read_contents(path))

    def from_content(self, path: str, content: str) -> None:
        self.from_data(path, self.deserialise(path, content))

    def from_data(self, path: str, content: Any) -> None:
        """Parse a deserialised document and register its definitions.

        Args:
            path: Path the document comes from; relative references resolve against it.
            content: The document, shaped as ``{extends?, parameters?, services?}``.

        Raises:
            DIException: If any section or definition is malformed.
        """
        if not isinstance(content, dict):
            raise DIException(f"The contents of the path `{path}` must represent an object")

        if "extends" in content:
            extensions = content["extends"]
            if not isinstance(extensions, list):
                raise DIException(f"The extends section in the path `{path}` must represent an array")

            for extension in extensions:
                if not isinstance(extension, str):
                    raise DIException(f"Each extended file must be added as a string in the path `{path}`")
                self.add_extend(self.get_full_path(path, extension))

        if "parameters" in content:
            parameters = content["parameters"]
            if not isinstance(parameters, dict):
                raise DIException(f"The parameters section in the path `{path}` must represent an object")

            for parameter_id, value in parameters.items():
                _check_id(path, parameter_id)
                context = DefinitionContext(path=path, id=parameter_id, definition=self.serialise(path, value))
                self.add_parameter(parameter_id, self.parse_value(context, value))

        if "services" in content:
            services = content["services"]
            if not isinstance(services, dict):
                raise DIException(f"The services section in the path `{path}` must represent an object")

            for service_id, value in services.items():
                _check_id(path, service_id)
                context = DefinitionContext(path=path, id=service_id, definition=self.serialise(path, value))
                if isinstance(value, str):
                    self.add_alias(service_id, self.parse_alias(context, value))
                else:
                    self.add_service(service_id, self.parse_service(context, value))

    # Grammar

    def _parse_env_value(self, context: DefinitionContext, value: str) -> T:
        name, *rest = value.split("/")
        declared_type = rest[0] if rest else EnvType.STRING.value
        fallback = "/".join(rest[1:]) if len(rest) > 1 else None

        try:
            env_type = EnvType(declared_type)
        except ValueError:
            raise DIException("Unknown environment variable type while parsing", context) from None

        if env_type == EnvType.BOOLEAN:
            return self.process_env_bool_value(context, name, fallback)
        if env_type == EnvType.NUMBER:
            return self.process_env_num_value(context, name, fallback)
        return self.process_env_str_value(context, name, fallback)

    def _parse_string(self, context: DefinitionContext, value: str) -> T:
        if is_first_char(value, "<"):
            return self.process_service_value(context, value[1:])

        # `${name}` is a placeholder, not a parameter reference
        if is_first_char(value, "$") and value[1] != "{":
            return self.process_parameter_value(context, value[1:])

        if is_first_char(value, ">"):
            return self.process_tag_list_value(context, value[1:])

        if is_first_char(value, "}"):
            return self.process_tag_object_value(context, value[1:])

        if is_first_char(value, "%"):
            return self._parse_env_value(context, value[1:])

        if is_first_char(value, "!"):
            return self.process_eval_value(context, value[1:])

        if is_first_char(value, "("):
            match = SYMBOL_PATTERN.match(value)
            if match is None:
                raise DIException(f"Malformed symbol reference `{value}`", context)
            return self.process_symbol_value(context, match.group(1), match.group(2))

        if is_first_char(value, "["):
            match = GLOB_PATTERN.match(value)
            if match is None:
                raise DIException(f"Malformed symbol pattern `{value}`", context)
            full_pattern = self.get_full_path(context.path, match.group(1), False)
            return self.process_literal_value(
                context,
                [self.process_symbol_value(context, path, match.group(2)) for path in self.glob(full_pattern)],
            )

        return self.process_literal_value(context, value)

    def parse_value(self, context: DefinitionContext, value: Any) -> T:
        """Parse any declarative value.

        Lists and dicts are parsed element-wise; dicts holding a ``symbol`` key
        are inline service definitions, and a ``_symbol`` key stands for a
        literal ``symbol`` key.
        """
        if isinstance(value, list):
            return self.process_literal_value(context, [self.parse_value(context, item) for item in value])

        if isinstance(value, dict):
            if "symbol" in value:
                return self.parse_service(context, value)

            items: Dict[str, Any] = {}
            for key, item in value.items():
                items["symbol" if key == "_symbol" else key] = self.parse_value(context, item)
            return self.process_literal_value(context, items)

        if isinstance(value, str):
            return self._parse_string(context, value)

        return self.process_literal_value(context, value)

    def parse_alias(self, context: DefinitionContext, value: Any) -> T:
        if not isinstance(value, str):
            raise DIException("A string definition was expected", context)
        return self.process_alias(context, value)

    def _parse_tag(self, context: DefinitionContext, value: Any) -> Tag:
        if isinstance(value, str):
            return Tag(name=value)

        if isinstance(value, dict):
            if "name" not in value:
                raise DIException("Dictionary tags must have the `name` key.", context)
            if not isinstance(value["name"], str):
                raise DIException("The `name` of a dictionary tag must be a string.", context)
            if not all(isinstance(key, str) for key in value):
                raise DIException("Dictionary tag attributes must have string keys.", context)
            return Tag(**value)

        raise DIException("Tags must be defined as strings or dictionaries.", context)

    def _parse_call(self, context: DefinitionContext, value: Any) -> Call:
        if isinstance(value, str):
            return Call(method=self.parse_value(context, value), params=[])

        if isinstance(value, dict):
            if "method" not in value:
                raise DIException("Dictionary calls must have the `method` key.", context)

            params = value.get("params", [])
            if not isinstance(params, list):
                raise DIException("Service call parameters must be an array of values.", context)

            return Call(
                method=self.parse_value(context, value["method"]),
                params=[self.parse_value(context, param) for param in params],
            )

        raise DIException("Calls must be defined as strings or dictionaries.", context)

    def _parse_args(self, context: DefinitionContext, value: Dict[str, Any]) -> List[T]:
        args = value.get("args", [])
        if not isinstance(args, list):
            raise DIException("Service arguments must be an array of values.", context)
        return [self.parse_value(context, arg) for arg in args]

    def parse_service(self, context: DefinitionContext, value: Any) -> T:
        """Parse a service definition.

        The kind of service depends on the keys present: ``factory`` makes a
        factory service, ``property`` a property service, neither a constructor
        service.

        Raises:
            DIException: If the definition is malformed.
            UnknownServiceTypeError: If both ``factory`` and ``property`` are declared.
        """
        if not isinstance(value, dict):
            raise DIException("A service can only be created from a dictionary", context)

        if "symbol" not in value:
            raise DIException("A service must declare the `symbol` property.", context)

        scope = value.get("scope")
        if scope is not None and not isinstance(scope, str):
            raise DIException("Service scope must be a string.", context)

        tags: List[Tag] = []
        if "tags" in value:
            if not isinstance(value["tags"], list):
                raise DIException("Service tags must be an array of tags.", context)
            tags = [self._parse_tag(context, tag) for tag in value["tags"]]

        calls: List[Call] = []
        if "calls" in value:
            if not isinstance(value["calls"], list):
                raise DIException("Service calls must be an array of calls.", context)
            calls = [self._parse_call(context, call) for call in value["calls"]]

        has_factory = "factory" in value
        has_property = "property" in value
        if has_factory and has_property:
            raise UnknownServiceTypeError(context)

        symbol = self.parse_value(context, value["symbol"])

        if has_factory:
            return self.process_factory_service(
                context,
                symbol,
                self.parse_value(context, value["factory"]),
                self._parse_args(context, value),
                scope,
                tags,
                calls,
            )

        if has_property:
            return self.process_property_service(
                context,
                symbol,
                self.parse_value(context, value["property"]),
                scope,
                tags,
                calls,
            )

        return self.process_constructor_service(context, symbol, self._parse_args(context, value), scope, tags, calls)
