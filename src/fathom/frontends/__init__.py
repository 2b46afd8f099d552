"""Front ends that turn program input into an op tree and symbol table."""

from pathlib import Path
from typing import Optional

from ..exceptions import InvalidPathError
from ..optree import Program
from .json_tree import load_program, program_from_dict
from .python_ast import OpTreeBuilder, lower_file, lower_source


def load_path(path: Path, module: Optional[str] = None) -> Program:
    """Pick a front end from the file suffix and load ``path``.

    ``.json`` files are op-tree documents; anything else is Python source.
    """
    if not path.exists():
        raise InvalidPathError(path, "does not exist")
    if not path.is_file():
        raise InvalidPathError(path, "is not a file")
    if path.suffix == ".json":
        return load_program(path)
    return lower_file(path, module=module)


__all__ = [
    "OpTreeBuilder",
    "load_path",
    "load_program",
    "lower_file",
    "lower_source",
    "program_from_dict",
]
