"""JSON front end: load an op tree dumped by an external compiler.

Document layout::

    {
      "main": <node>,
      "code": {"<id>": <node> | null, ...},
      "symbols": <namespace>
    }

    <node>      = {"name": str, "family": str?, "line": int?, "children": [<node>, ...]?}
    <namespace> = {"name": str, "entries": {"<key>": <entry>, ...}}
    <entry>     = {"code": "<id>"} | {"value": any} | {"namespace": <namespace>}

``family`` defaults to "plain". Entries that reference the same code id share
one code object, which is how re-exported subroutines are expressed. A code
id mapped to ``null`` is a declaration without a body.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..exceptions import InvalidTreeError, ParsingError
from ..logging_config import get_logger
from ..optree import CodeObject, Namespace, Node, OpFamily, Program

logger = get_logger(__name__)

FAMILIES = {family.value: family for family in OpFamily}


def _expect(value: Any, kind: type, path: str) -> Any:
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise InvalidTreeError(path, f"expected {kind.__name__}, got {type(value).__name__}")
    return value


def node_from_dict(data: Any, path: str = "$") -> Node:
    """Build a Node tree from its JSON form.

    Uses an explicit stack so deeply nested dumps load without recursion.
    """
    root = _node_shell(data, path)
    stack = [(root, data, path)]
    while stack:
        node, raw, raw_path = stack.pop()
        children = _expect(raw.get("children", []), list, f"{raw_path}.children")
        for index, child in enumerate(children):
            child_path = f"{raw_path}.children[{index}]"
            child_node = _node_shell(child, child_path)
            node.children.append(child_node)
            stack.append((child_node, child, child_path))
    return root


def _node_shell(data: Any, path: str) -> Node:
    _expect(data, dict, path)
    name = _expect(data.get("name"), str, f"{path}.name")
    family_name = _expect(data.get("family", "plain"), str, f"{path}.family")
    family = FAMILIES.get(family_name)
    if family is None:
        raise InvalidTreeError(
            f"{path}.family", f"unknown family '{family_name}', expected one of {', '.join(FAMILIES)}"
        )
    line = data.get("line")
    if line is not None:
        _expect(line, int, f"{path}.line")
    return Node(name, family, line=line)


def program_from_dict(data: Any, source: str = "<json>") -> Program:
    """Build a Program from a decoded JSON document.

    Raises:
        InvalidTreeError: If the document does not follow the layout above.
    """
    _expect(data, dict, "$")
    if "main" not in data:
        raise InvalidTreeError("$", "missing 'main'")
    main = node_from_dict(data["main"], "$.main")

    code_objects: dict[str, CodeObject] = {}
    for code_id, body in _expect(data.get("code", {}), dict, "$.code").items():
        path = f"$.code.{code_id}"
        code_objects[code_id] = CodeObject(code_id, None if body is None else node_from_dict(body, path))

    symbols_data = data.get("symbols", {"name": "main", "entries": {}})
    symbols = _namespace_from_dict(symbols_data, code_objects, "$.symbols")
    return Program(main=main, symbols=symbols, source=source)


def _namespace_from_dict(data: Any, code_objects: dict[str, CodeObject], path: str) -> Namespace:
    _expect(data, dict, path)
    namespace = Namespace(_expect(data.get("name", ""), str, f"{path}.name"))
    entries = _expect(data.get("entries", {}), dict, f"{path}.entries")
    for key, entry in entries.items():
        entry_path = f"{path}.entries.{key}"
        _expect(entry, dict, entry_path)
        if "namespace" in entry:
            namespace.entries[key] = _namespace_from_dict(
                entry["namespace"], code_objects, f"{entry_path}.namespace"
            )
        elif "code" in entry:
            code_id = _expect(entry["code"], str, f"{entry_path}.code")
            if code_id not in code_objects:
                raise InvalidTreeError(f"{entry_path}.code", f"unknown code id '{code_id}'")
            namespace.bind(key, code_objects[code_id])
        else:
            namespace.bind(key, entry.get("value"))
    return namespace


def load_program(path: Path) -> Program:
    """Read a JSON op-tree document from disk.

    Raises:
        ParsingError: If the file is not UTF-8 JSON or nests too deeply.
        InvalidTreeError: If the JSON does not describe a program.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        program = program_from_dict(data, source=str(path))
    except json.JSONDecodeError as e:
        raise ParsingError(str(path), f"invalid JSON: {e}")
    except UnicodeDecodeError as e:
        raise ParsingError(str(path), f"not UTF-8: {e}")
    except RecursionError:
        raise ParsingError(str(path), "nesting too deep")

    logger.debug(f"Loaded {path}: {program.main.size()} ops in main body")
    return program
