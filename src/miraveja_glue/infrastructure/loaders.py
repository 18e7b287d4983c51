import json
from typing import Any, List, Optional

import yaml

from miraveja_glue.application import Loader
from miraveja_glue.domain import DeserialiseError, IEvaluator, ISymbolImporter, SerialiseError
from miraveja_glue.infrastructure import filesystem
from miraveja_glue.infrastructure.evaluator import PythonEvaluator
from miraveja_glue.infrastructure.importer import ModuleImporter


class FileLoader(Loader):
    """Loader reading documents from the filesystem.

    Uses ``ModuleImporter`` and ``PythonEvaluator`` unless other capabilities
    are given. Subclasses only pick the document format.
    """

    def __init__(
        self,
        default_scope: Optional[str] = None,
        importer: Optional[ISymbolImporter] = None,
        evaluator: Optional[IEvaluator] = None,
    ) -> None:
        super().__init__(
            importer=importer if importer is not None else ModuleImporter(),
            evaluator=evaluator if evaluator is not None else PythonEvaluator(),
            default_scope=default_scope,
        )

    def glob(self, pattern: str) -> List[str]:
        return filesystem.glob(pattern)

    def get_full_path(self, base_file: str, relative: str, should_exist: bool = True) -> str:
        return filesystem.get_full_path(base_file, relative, should_exist)

    def read_contents(self, path: str) -> str:
        return filesystem.read_contents(path)


class YamlLoader(FileLoader):
    """Loads YAML definition documents.

    Example:
        >>> loader = YamlLoader()
        >>> loader.from_path("/app/config/services.yaml")
        >>> container = loader.get_container()
    """

    def serialise(self, path: str, data: Any) -> str:
        try:
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        except yaml.YAMLError as e:
            raise SerialiseError("YAML", path) from e

    def deserialise(self, path: str, data: str) -> Any:
        try:
            return yaml.safe_load(data)
        except yaml.YAMLError as e:
            raise DeserialiseError("YAML", path) from e


class JsonLoader(FileLoader):
    """Loads JSON definition documents."""

    def serialise(self, path: str, data: Any) -> str:
        try:
            return json.dumps(data, indent=2)
        except (TypeError, ValueError) as e:
            raise SerialiseError("JSON", path) from e

    def deserialise(self, path: str, data: str) -> Any:
        try:
            return json.loads(data)
        except ValueError as e:
            raise DeserialiseError("JSON", path) from e
