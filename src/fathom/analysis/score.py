"""Readability score from final counters.

    score = 0.55 * tokens/expressions
          + 0.28 * expressions/statements
          + 0.08 * statements/subroutines

The weights are empirical and are not normalized; they sum to 0.91.
Scores map to labels on half-open unit intervals, so a score of exactly 2.0
is "very readable", not "easy". The label is picked from the exact
:class:`~fractions.Fraction` score; only the stored score is a float.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Union

from ..exceptions import DegenerateInputError
from ..exceptions.analysis import COUNTER_NAMES
from .counters import Counters

TOKEN_PER_EXPR_WEIGHT = Fraction(55, 100)
EXPR_PER_STMT_WEIGHT = Fraction(28, 100)
STMT_PER_SUB_WEIGHT = Fraction(8, 100)

# Label for [i, i + 1); anything from len(OPINIONS) upwards is OBFUSCATED.
OPINIONS = (
    "trivial",
    "easy",
    "very readable",
    "readable",
    "easier than the norm",
    "mature",
    "complex",
    "very difficult",
)
OBFUSCATED = "obfuscated"

NOUNS = {
    "tokens": "token",
    "expressions": "expression",
    "statements": "statement",
    "subroutines": "subroutine",
}


@dataclass(frozen=True)
class Readability:
    """Final counts, the three ratios, and the weighted score with its label."""

    tokens: int
    expressions: int
    statements: int
    subroutines: int
    token_per_expr: float
    expr_per_stmt: float
    stmt_per_sub: float
    score: float
    opinion: str

    def counts(self) -> list[tuple[str, int]]:
        return [(counter, getattr(self, counter)) for counter in COUNTER_NAMES]

    def to_dict(self) -> dict:
        return {
            "tokens": self.tokens,
            "expressions": self.expressions,
            "statements": self.statements,
            "subroutines": self.subroutines,
            "token_per_expr": self.token_per_expr,
            "expr_per_stmt": self.expr_per_stmt,
            "stmt_per_sub": self.stmt_per_sub,
            "score": round(self.score, 2),
            "opinion": self.opinion,
        }


def count_label(count: int, counter: str) -> str:
    """``count_label(1, "tokens")`` -> "token", any other count -> "tokens"."""
    noun = NOUNS[counter]
    return noun if count == 1 else f"{noun}s"


def validate_counters(counters: Counters) -> None:
    """Raise DegenerateInputError for the first zero counter, in report order."""
    for counter in COUNTER_NAMES:
        if getattr(counters, counter) == 0:
            raise DegenerateInputError(counter)


def opinion_for(score: Union[float, Fraction]) -> str:
    if score < 0 or math.isnan(score):
        raise ValueError(f"Readability score must be non-negative, got {score}")
    bracket = math.floor(score)
    if bracket >= len(OPINIONS):
        return OBFUSCATED
    return OPINIONS[bracket]


def score_counters(counters: Counters) -> Readability:
    """Compute the readability verdict for a finished run.

    Raises:
        DegenerateInputError: If any counter is zero.
    """
    validate_counters(counters)

    token_per_expr = Fraction(counters.tokens, counters.expressions)
    expr_per_stmt = Fraction(counters.expressions, counters.statements)
    stmt_per_sub = Fraction(counters.statements, counters.subroutines)

    exact = (
        token_per_expr * TOKEN_PER_EXPR_WEIGHT
        + expr_per_stmt * EXPR_PER_STMT_WEIGHT
        + stmt_per_sub * STMT_PER_SUB_WEIGHT
    )

    return Readability(
        tokens=counters.tokens,
        expressions=counters.expressions,
        statements=counters.statements,
        subroutines=counters.subroutines,
        token_per_expr=float(token_per_expr),
        expr_per_stmt=float(expr_per_stmt),
        stmt_per_sub=float(stmt_per_sub),
        score=float(exact),
        opinion=opinion_for(exact),
    )
