"""Symbol-table passes: occurrence counting, then subroutine collection.

The two passes are separate. Collection filters on how many
bindings share a code object, which is only known once the scan has seen the
whole table, so :class:`SubroutineCollector` refuses to run against an
unfinished :class:`SymbolOccurrences`.

A code object reachable under more than one name is assumed to be imported
or re-exported rather than authored here, and is left out of the analysis.
This is a heuristic: two deliberately aliased local names are excluded too,
and a re-export whose source is not in the table is still analyzed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from ..exceptions import UnresolvableSymbolWarning
from ..logging_config import get_logger
from ..optree import Binding, CodeObject, Namespace, Node

logger = get_logger(__name__)


def walk_symbols(root: Namespace, recurse: bool = True) -> Iterator[tuple[str, Any]]:
    """Yield ``(qualified_name, entry)`` for every non-namespace entry.

    Entries are visited in sorted key order, depth-first. Each namespace is
    entered at most once, so self-referencing tables terminate. With
    ``recurse=False`` only the entries directly in ``root`` are yielded.
    """
    seen: set[int] = {id(root)}
    stack: list[Namespace] = [root]
    while stack:
        namespace = stack.pop()
        nested: list[Namespace] = []
        for key in sorted(namespace.entries):
            entry = namespace.entries[key]
            if isinstance(entry, Namespace):
                if recurse and id(entry) not in seen:
                    seen.add(id(entry))
                    nested.append(entry)
                continue
            yield namespace.qualify(key), entry
        # reversed so the first nested namespace is popped first
        stack.extend(reversed(nested))


@dataclass
class SymbolOccurrences:
    """How many bindings resolve to each code object.

    Keys are code objects compared by identity. ``names`` keeps the first
    qualified name seen for each one, for diagnostics only.
    """

    counts: dict[CodeObject, int] = field(default_factory=dict)
    names: dict[CodeObject, str] = field(default_factory=dict)
    unresolved: list[UnresolvableSymbolWarning] = field(default_factory=list)
    complete: bool = False

    def record(self, name: str, code: CodeObject) -> None:
        self.counts[code] = self.counts.get(code, 0) + 1
        self.names.setdefault(code, name)

    def multiplicity(self, code: CodeObject) -> int:
        return self.counts.get(code, 0)

    def reexported(self) -> list[str]:
        """Representative names of code objects bound more than once, sorted."""
        return sorted(self.names[code] for code, count in self.counts.items() if count > 1)


class SymbolScanner:
    """First pass: count bindings per code object across the whole table."""

    def scan(self, symbols: Namespace) -> SymbolOccurrences:
        occurrences = SymbolOccurrences()
        for name, entry in walk_symbols(symbols, recurse=True):
            code = self._resolve(name, entry, occurrences)
            if code is not None:
                occurrences.record(name, code)
        occurrences.complete = True
        logger.debug(
            "Scanned symbol table %s: %d code objects, %d unresolved entries",
            symbols.name,
            len(occurrences.counts),
            len(occurrences.unresolved),
        )
        return occurrences

    def _resolve(self, name: str, entry: Any, occurrences: SymbolOccurrences) -> CodeObject | None:
        if not isinstance(entry, Binding):
            self._unresolved(occurrences, name, f"not a binding ({type(entry).__name__})")
            return None
        code = entry.code
        if code is None:
            # data binding
            return None
        if code.body is None:
            self._unresolved(occurrences, name, "declared without a body")
            return None
        if not isinstance(code.body, Node):
            self._unresolved(occurrences, name, f"body is {type(code.body).__name__}, not an op")
            return None
        return code

    @staticmethod
    def _unresolved(occurrences: SymbolOccurrences, name: str, reason: str) -> None:
        logger.debug("Skipping %s: %s", name, reason)
        occurrences.unresolved.append(UnresolvableSymbolWarning(name, reason))


@dataclass
class QueuedBody:
    """A subroutine body scheduled for traversal."""

    name: str
    code: CodeObject

    @property
    def root(self) -> Node:
        assert self.code.body is not None
        return self.code.body


@dataclass
class Worklist:
    bodies: list[QueuedBody] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.bodies)

    def __iter__(self) -> Iterator[QueuedBody]:
        return iter(self.bodies)


class SubroutineCollector:
    """Second pass: queue bodies whose code object has exactly one binding."""

    def __init__(self, occurrences: SymbolOccurrences, recurse: bool = True):
        if not occurrences.complete:
            raise ValueError("Symbol scan must finish before collection starts")
        self.occurrences = occurrences
        self.recurse = recurse

    def collect(self, symbols: Namespace) -> Worklist:
        worklist = Worklist()
        for name, entry in walk_symbols(symbols, recurse=self.recurse):
            if not isinstance(entry, Binding):
                continue
            code = entry.code
            count = self.occurrences.multiplicity(code) if code is not None else 0
            if count == 0:
                # data binding or unresolvable, already reported by the scan
                continue
            if count > 1:
                worklist.skipped.append(name)
                continue
            worklist.bodies.append(QueuedBody(name, code))

        worklist.skipped.sort()
        logger.debug(
            "Collected %d subroutine bodies, skipped %d re-exported bindings",
            len(worklist.bodies),
            len(worklist.skipped),
        )
        return worklist
