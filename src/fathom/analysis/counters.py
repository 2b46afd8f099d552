"""Running structural counters for one analysis run."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from .taxonomy import Increment


@dataclass
class Counters:
    """Accumulate tokens, expressions, statements and subroutines.

    Counts only ever grow during a run; a new run starts from a new instance.
    """

    tokens: int = 0
    expressions: int = 0
    statements: int = 0
    subroutines: int = 0

    def apply(self, increment: Increment) -> None:
        self.tokens += increment.tokens
        self.expressions += increment.expressions
        self.statements += increment.statements
        self.subroutines += increment.subroutines

    def merge(self, other: Counters) -> None:
        self.apply(Increment(other.tokens, other.expressions, other.statements, other.subroutines))

    def __add__(self, other: Counters) -> Counters:
        if not isinstance(other, Counters):
            return NotImplemented
        total = Counters(**asdict(self))
        total.merge(other)
        return total

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.tokens, self.expressions, self.statements, self.subroutines)

    def to_dict(self) -> dict[str, int]:
        return asdict(self)
