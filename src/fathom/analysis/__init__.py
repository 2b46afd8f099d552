"""Readability analysis core: taxonomy, symbol passes, traversal, scoring."""

from .counters import Counters
from .engine import AnalysisResult, AnalysisRun, TraceEntry, run_analysis
from .score import Readability, count_label, opinion_for, score_counters
from .symbols import SubroutineCollector, SymbolOccurrences, SymbolScanner, Worklist
from .taxonomy import Category, Increment, classify
from .walker import TreeWalker

__all__ = [
    "AnalysisResult",
    "AnalysisRun",
    "Category",
    "Counters",
    "Increment",
    "Readability",
    "SubroutineCollector",
    "SymbolOccurrences",
    "SymbolScanner",
    "TraceEntry",
    "TreeWalker",
    "Worklist",
    "classify",
    "count_label",
    "opinion_for",
    "run_analysis",
    "score_counters",
]
