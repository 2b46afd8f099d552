"""Op-tree data model consumed by the analysis core.

A front end lowers a program into three things:

    - a main body: the root :class:`Node` of the top-level code
    - code objects: one :class:`CodeObject` per subroutine body
    - a symbol table: nested :class:`Namespace` objects whose
      :class:`Binding` entries map names to values, some of them code objects

Several bindings may share one code object. Code objects are compared by
identity, never by name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional


class OpFamily(Enum):
    """Structural shape of an op, independent of its exact name."""

    PLAIN = "plain"
    UNARY = "unary"
    BINARY = "binary"
    LOGICAL = "logical"
    LIST = "list"
    LOOP = "loop"
    CONDITIONAL = "conditional"

    @property
    def parent(self) -> Optional[OpFamily]:
        return _FAMILY_PARENTS[self]

    def lineage(self) -> Iterator[OpFamily]:
        """Yield this family followed by its ancestors, most specific first."""
        family: Optional[OpFamily] = self
        while family is not None:
            yield family
            family = family.parent

    def isa(self, other: OpFamily) -> bool:
        return any(family is other for family in self.lineage())


_FAMILY_PARENTS: dict[OpFamily, Optional[OpFamily]] = {
    OpFamily.PLAIN: None,
    OpFamily.UNARY: None,
    OpFamily.BINARY: OpFamily.UNARY,
    OpFamily.LIST: OpFamily.BINARY,
    OpFamily.LOOP: OpFamily.LIST,
    OpFamily.LOGICAL: OpFamily.UNARY,
    OpFamily.CONDITIONAL: OpFamily.UNARY,
}


@dataclass(eq=False)
class Node:
    """One op in the program tree.

    Attributes:
        name: Op name (e.g. "nextstate", "add", "entersub")
        family: Structural shape used when no exact-name rule applies
        children: Child ops, in source order
        line: Source line, if the front end knows it
    """

    name: str
    family: OpFamily = OpFamily.PLAIN
    children: list[Node] = field(default_factory=list)
    line: Optional[int] = None

    def isa(self, family: OpFamily) -> bool:
        return self.family.isa(family)

    def size(self) -> int:
        """Number of ops in this subtree, including this one."""
        total = 0
        stack = [self]
        while stack:
            node = stack.pop()
            total += 1
            stack.extend(node.children)
        return total

    def __repr__(self) -> str:
        return f"Node({self.name!r}, {self.family.value}, children={len(self.children)})"


@dataclass(eq=False)
class CodeObject:
    """The body of one subroutine.

    ``body`` is ``None`` for a declaration that was never given a body.
    """

    name: str
    body: Optional[Node] = None

    def __repr__(self) -> str:
        state = "defined" if self.body is not None else "declared"
        return f"CodeObject({self.name!r}, {state})"


@dataclass
class Binding:
    """A named entry in a namespace."""

    name: str
    value: Any = None

    @property
    def code(self) -> Optional[CodeObject]:
        return self.value if isinstance(self.value, CodeObject) else None

    @property
    def is_subroutine(self) -> bool:
        return isinstance(self.value, CodeObject)


@dataclass(eq=False)
class Namespace:
    """A symbol table scope: entry name -> Binding or nested Namespace."""

    name: str
    entries: dict[str, Any] = field(default_factory=dict)

    def bind(self, key: str, value: Any) -> Binding:
        binding = Binding(key, value)
        self.entries[key] = binding
        return binding

    def child(self, key: str) -> Namespace:
        """Return the nested namespace under ``key``, creating it if needed."""
        existing = self.entries.get(key)
        if isinstance(existing, Namespace):
            return existing
        namespace = Namespace(self.qualify(key))
        self.entries[key] = namespace
        return namespace

    def qualify(self, key: str) -> str:
        return f"{self.name}.{key}" if self.name else key

    def __repr__(self) -> str:
        return f"Namespace({self.name!r}, entries={len(self.entries)})"


@dataclass
class Program:
    """A lowered program: main body plus its symbol table."""

    main: Node
    symbols: Namespace
    source: str = "<program>"
