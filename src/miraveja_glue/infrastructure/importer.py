import importlib
import importlib.util
import inspect
import logging
import os
import re
import sys
from types import ModuleType
from typing import Any, Callable, Dict, List

from miraveja_glue.domain import DefinitionContext, DIException, ISymbolImporter, SymbolFilter

logger = logging.getLogger(__name__)

FILTERS: Dict[SymbolFilter, Callable[[Any], bool]] = {
    SymbolFilter.ANY: lambda value: True,
    SymbolFilter.CLASS: inspect.isclass,
    SymbolFilter.FUNCTION: lambda value: inspect.isfunction(value) or inspect.isbuiltin(value),
}


class ModuleImporter(ISymbolImporter):
    """Imports modules by dotted name or by file path.

    References containing a ``/`` or ending in ``.py`` are files, resolved
    relative to the document they appear in; anything else is a dotted module
    name. File modules are registered in ``sys.modules`` under a name derived
    from their path, so importing the same file twice yields the same module.
    """

    def import_module(self, base_path: str, path: str) -> ModuleType:
        if "/" not in path and not path.endswith(".py"):
            return importlib.import_module(path)

        full_path = path if os.path.isabs(path) else os.path.join(os.path.dirname(base_path), path)
        full_path = os.path.normpath(full_path)
        if os.path.isdir(full_path):
            full_path = os.path.join(full_path, "__init__.py")

        module_name = "_miraveja_glue_" + re.sub(r"\W", "_", full_path)
        if module_name in sys.modules:
            return sys.modules[module_name]

        spec = importlib.util.spec_from_file_location(module_name, full_path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot import `{full_path}`")

        logger.debug("Importing `%s` as `%s`", full_path, module_name)
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            del sys.modules[module_name]
            raise
        return module

    def _exported_symbols(self, module: ModuleType) -> List[Any]:
        exported = getattr(module, "__all__", None)
        if exported is not None:
            return [getattr(module, name) for name in exported]

        return [
            value
            for name, value in vars(module).items()
            if not name.startswith("_")
            and not inspect.ismodule(value)
            and getattr(value, "__module__", None) == module.__name__
        ]

    def resolve_exported_symbol(
        self,
        module: ModuleType,
        symbol_filter: SymbolFilter,
        context: DefinitionContext,
    ) -> Any:
        matches = [value for value in self._exported_symbols(module) if FILTERS[symbol_filter](value)]

        if len(matches) > 1:
            raise DIException("Multiple exported symbols were found", context)
        if not matches:
            raise DIException("A suitable exported symbol was not found", context)
        return matches[0]
