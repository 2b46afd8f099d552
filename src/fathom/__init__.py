"""
Fathom - a code comprehension estimator

Walks a program's op tree, counts tokens, expressions, statements and
subroutines, and turns their ratios into a readability score with a
plain-language verdict, from "trivial" to "obfuscated".
"""

__version__ = "0.1.0"

from .analysis import AnalysisResult, Readability
from .api import analyze, analyze_path, analyze_source
from .config import FathomConfig, load_config
from .exceptions import DegenerateInputError, FathomError
from .optree import Binding, CodeObject, Namespace, Node, OpFamily, Program

__all__ = [
    "analyze",  # Main entry point for prebuilt op trees
    "analyze_source",
    "analyze_path",
    "AnalysisResult",
    "Readability",
    "FathomConfig",
    "load_config",
    "FathomError",
    "DegenerateInputError",
    "Binding",
    "CodeObject",
    "Namespace",
    "Node",
    "OpFamily",
    "Program",
]
