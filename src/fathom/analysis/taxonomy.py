"""Op taxonomy: which structural category each op falls into.

Classification is a two-step lookup. An op's exact name is checked first
(``EXACT_CATEGORIES``, then the ``leave*`` prefix rule). Ops with no exact
rule fall back to their shape family, tried in ``FAMILY_PRIORITY`` order
against the family lineage, so a loop op is never mistaken for a plain list
op. Anything left over is a single token.

Each category carries a fixed increment. The amounts approximate how many
surface tokens and independent sub-expressions the construct stands for in
the source text, e.g. ``sub name { ... }`` is four tokens and one expression.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from ..optree import Node, OpFamily


class Increment(NamedTuple):
    tokens: int = 0
    expressions: int = 0
    statements: int = 0
    subroutines: int = 0


class Category(Enum):
    IGNORABLE = "ignorable"
    STATEMENT_BOUNDARY = "statement-boundary"
    SUBROUTINE_EXIT = "subroutine-exit"
    SCOPE_EXIT = "scope-exit-paired"
    PROTECTED_BLOCK = "protected-block-entry"
    INLINE_CODE = "inline-code-block"
    BARE_BLOCK = "bare-block-scope"
    CALL_SITE = "call-site"
    LOOP = "loop"
    LIST = "list-operand"
    BINARY = "binary"
    LOGICAL = "logical"
    CONDITIONAL = "conditional"
    UNARY = "unary"
    DEFAULT = "unclassified"

    @property
    def increment(self) -> Increment:
        return INCREMENTS[self]


INCREMENTS: dict[Category, Increment] = {
    Category.IGNORABLE: Increment(),
    Category.STATEMENT_BOUNDARY: Increment(tokens=1, statements=1),
    Category.SUBROUTINE_EXIT: Increment(tokens=4, expressions=1, subroutines=1),
    # already accounted for by the matching enter op
    Category.SCOPE_EXIT: Increment(),
    Category.PROTECTED_BLOCK: Increment(tokens=3, expressions=1),
    Category.INLINE_CODE: Increment(tokens=3, expressions=1),
    Category.BARE_BLOCK: Increment(tokens=3, expressions=1),
    Category.CALL_SITE: Increment(tokens=3, expressions=1),
    Category.LOOP: Increment(tokens=5, expressions=2),
    Category.LIST: Increment(tokens=3, expressions=1),
    Category.BINARY: Increment(tokens=1, expressions=1),
    Category.LOGICAL: Increment(tokens=1, expressions=1),
    Category.CONDITIONAL: Increment(tokens=5, expressions=2),
    Category.UNARY: Increment(tokens=1, expressions=1),
    Category.DEFAULT: Increment(tokens=1),
}

EXACT_CATEGORIES: dict[str, Category] = {
    "null": Category.IGNORABLE,
    "enter": Category.IGNORABLE,
    "pushmark": Category.IGNORABLE,
    "unstack": Category.IGNORABLE,
    "lineseq": Category.IGNORABLE,
    "stub": Category.IGNORABLE,
    "nextstate": Category.STATEMENT_BOUNDARY,
    "dbstate": Category.STATEMENT_BOUNDARY,
    "leavesub": Category.SUBROUTINE_EXIT,
    "entertry": Category.PROTECTED_BLOCK,
    "anoncode": Category.INLINE_CODE,
    "scope": Category.BARE_BLOCK,
    "entersub": Category.CALL_SITE,
}

SCOPE_EXIT_PREFIX = "leave"

FAMILY_PRIORITY: tuple[tuple[OpFamily, Category], ...] = (
    (OpFamily.LOOP, Category.LOOP),
    (OpFamily.LIST, Category.LIST),
    (OpFamily.BINARY, Category.BINARY),
    (OpFamily.LOGICAL, Category.LOGICAL),
    (OpFamily.CONDITIONAL, Category.CONDITIONAL),
    (OpFamily.UNARY, Category.UNARY),
)


def classify(node: Node) -> Category:
    """Return the single category that applies to ``node``. Never raises."""
    category = EXACT_CATEGORIES.get(node.name)
    if category is not None:
        return category
    if node.name.startswith(SCOPE_EXIT_PREFIX):
        return Category.SCOPE_EXIT
    for family, category in FAMILY_PRIORITY:
        if node.isa(family):
            return category
    return Category.DEFAULT
