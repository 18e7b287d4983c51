"""Filesystem helpers used to locate and read definition documents."""

import glob as globbing
import os
from typing import List

from miraveja_glue.domain import DIException


def glob(pattern: str) -> List[str]:
    """Return the files matching a pattern, sorted; ``**`` spans directories."""
    return sorted(path for path in globbing.glob(pattern, recursive=True) if os.path.isfile(path))


def get_full_path(base_file: str, relative: str, should_exist: bool = True) -> str:
    """Resolve ``relative`` against the directory holding ``base_file``.

    Raises:
        DIException: If ``should_exist`` is set and nothing exists at the resolved path.
    """
    path = os.path.normpath(os.path.join(os.path.dirname(base_file), relative))
    if should_exist and not os.path.exists(path):
        raise DIException(f"The path `{path}` referenced from `{base_file}` does not exist")
    return path


def read_contents(path: str) -> str:
    with open(path, encoding="utf-8") as file:
        return file.read()
