"""
Infrastructure layer - External integrations.

This layer contains the document formats, the filesystem and import
capabilities, and integrations with external frameworks and tools.
It depends on both Application and Domain layers.
"""

from . import fastapi_integration, testing
from .evaluator import PythonEvaluator
from .importer import ModuleImporter
from .loaders import FileLoader, JsonLoader, YamlLoader

__all__ = [
    "fastapi_integration",
    "testing",
    "FileLoader",
    "JsonLoader",
    "YamlLoader",
    "ModuleImporter",
    "PythonEvaluator",
]
