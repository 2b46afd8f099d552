"""Analysis pipeline for one program.

Stages, each finishing before the next starts:
  Scan symbols → Collect subroutine bodies
               → Walk main body + bodies (classify every op)
               → Count the program body as a subroutine
               → Score

All state lives on the AnalysisRun, so two runs never share counters,
occurrence maps or worklists.
"""

from __future__ import annotations

import warnings
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from ..config import FathomConfig
from ..exceptions import UnclassifiedNodeWarning
from ..logging_config import get_logger
from ..optree import Namespace, Node, Program
from .counters import Counters
from .score import Readability, score_counters
from .symbols import SubroutineCollector, SymbolOccurrences, SymbolScanner, Worklist
from .taxonomy import Category, Increment, classify
from .walker import TreeWalker

logger = get_logger(__name__)

MAIN_BODY = "<main>"

# The body of the program counts as a subroutine.
PROGRAM_BODY = Increment(subroutines=1)


@dataclass(frozen=True)
class TraceEntry:
    """One classified op, recorded at verbosity 2 and above."""

    body: str
    depth: int
    op: str
    category: Category
    increment: Increment

    def to_dict(self) -> dict:
        return {
            "body": self.body,
            "depth": self.depth,
            "op": self.op,
            "category": self.category.value,
            "increment": self.increment._asdict(),
        }


@dataclass
class AnalysisResult:
    """Everything one run produced.

    Attributes:
        source: Label of the analyzed program
        readability: Counters, ratios, score and label
        skipped: Excluded re-exported code objects, one name each, sorted
        skipped_bindings: Every binding name excluded by the collector, sorted
        analyzed: Names of the subroutine bodies walked, in walk order
        unresolved: Symbol entries that could not be resolved
        unclassified: Op name -> count for ops that hit the default branch
        nodes_visited: Total ops classified
        trace: Per-op classification record (verbosity >= 2 only)
    """

    source: str
    readability: Readability
    skipped: list[str] = field(default_factory=list)
    skipped_bindings: list[str] = field(default_factory=list)
    analyzed: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)
    unclassified: dict[str, int] = field(default_factory=dict)
    nodes_visited: int = 0
    trace: list[TraceEntry] = field(default_factory=list)

    @property
    def score(self) -> float:
        return self.readability.score

    @property
    def opinion(self) -> str:
        return self.readability.opinion

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "readability": self.readability.to_dict(),
            "skipped": list(self.skipped),
            "skipped_bindings": list(self.skipped_bindings),
            "analyzed": list(self.analyzed),
            "unresolved": list(self.unresolved),
            "unclassified": dict(sorted(self.unclassified.items())),
            "nodes_visited": self.nodes_visited,
            "trace": [entry.to_dict() for entry in self.trace],
        }


class AnalysisRun:
    """Owns the state of a single analysis and runs the pipeline once."""

    def __init__(
        self,
        main: Node,
        symbols: Namespace,
        config: Optional[FathomConfig] = None,
        source: str = "<program>",
    ):
        self.main = main
        self.symbols = symbols
        self.config = config or FathomConfig()
        self.source = source

        self.counters = Counters()
        self.occurrences: Optional[SymbolOccurrences] = None
        self.worklist: Optional[Worklist] = None
        self.unclassified: Counter[str] = Counter()
        self.trace: list[TraceEntry] = []
        self._body = MAIN_BODY
        self._finished = False

    @classmethod
    def for_program(cls, program: Program, config: Optional[FathomConfig] = None) -> AnalysisRun:
        return cls(program.main, program.symbols, config=config, source=program.source)

    def execute(self) -> AnalysisResult:
        """Run every stage and score the result.

        Raises:
            DegenerateInputError: If a counter is still zero after the walk.
            RuntimeError: If this run was already executed.
        """
        if self._finished:
            raise RuntimeError("AnalysisRun instances are single-use; create a new run")
        self._finished = True

        logger.debug(f"Analyzing {self.source}")

        # Stage 1: count bindings per code object over the whole table
        self.occurrences = SymbolScanner().scan(self.symbols)

        # Stage 2: queue bodies bound exactly once
        self.worklist = SubroutineCollector(
            self.occurrences, recurse=self.config.recurse_namespaces
        ).collect(self.symbols)

        skipped = self.occurrences.reexported()
        if self.config.reports_skipped:
            for name in skipped:
                logger.debug(f"Skipping imported sub '{name}'")
        logger.info(
            f"{self.source}: {len(self.worklist)} subroutines queued, "
            f"{len(skipped)} re-exported skipped"
        )

        # Stage 3: classify every op, main body first
        walker = TreeWalker(self._tally)
        walker.walk(self.main)
        for queued in self.worklist:
            self._body = queued.name
            walker.walk(queued.root)
        self._body = MAIN_BODY

        # Stage 4
        self.counters.apply(PROGRAM_BODY)

        logger.debug(
            f"Walked {walker.visited} ops in {len(self.worklist) + 1} bodies: "
            f"{self.counters.to_dict()}"
        )

        if self.config.emit_warnings:
            self._emit_warnings()

        # Stage 5
        readability = score_counters(self.counters)

        return AnalysisResult(
            source=self.source,
            readability=readability,
            skipped=skipped,
            skipped_bindings=list(self.worklist.skipped),
            analyzed=[queued.name for queued in self.worklist],
            unresolved=[warning.name for warning in self.occurrences.unresolved],
            unclassified=dict(self.unclassified),
            nodes_visited=walker.visited,
            trace=list(self.trace),
        )

    def _tally(self, node: Node, depth: int) -> None:
        category = classify(node)
        increment = category.increment
        self.counters.apply(increment)

        if category is Category.DEFAULT:
            self.unclassified[node.name] += 1

        if self.config.traces_nodes:
            self.trace.append(TraceEntry(self._body, depth, node.name, category, increment))
            logger.debug(f"{'  ' * depth}{node.name} [{category.value}]")

    def _emit_warnings(self) -> None:
        assert self.occurrences is not None
        for warning in self.occurrences.unresolved:
            warnings.warn(warning, stacklevel=3)
        for name, count in sorted(self.unclassified.items()):
            warnings.warn(UnclassifiedNodeWarning(name, count), stacklevel=3)


def run_analysis(
    main: Node,
    symbols: Namespace,
    config: Optional[FathomConfig] = None,
    source: str = "<program>",
) -> AnalysisResult:
    """Analyze one program with a fresh AnalysisRun."""
    return AnalysisRun(main, symbols, config=config, source=source).execute()


__all__ = [
    "AnalysisResult",
    "AnalysisRun",
    "TraceEntry",
    "run_analysis",
]
