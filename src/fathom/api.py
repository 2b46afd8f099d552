"""Public API for Fathom.

Example:
    >>> from fathom import analyze_source
    >>>
    >>> result = analyze_source("print('hello')")
    >>> result.opinion
    'readable'
    >>>
    >>> # Report skipped re-exported subroutines
    >>> result = analyze_path("script.py", verbose=True)
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from .analysis import AnalysisResult, AnalysisRun
from .config import FathomConfig, load_config
from .frontends import load_path, lower_source
from .logging_config import get_logger
from .optree import Namespace, Node

logger = get_logger(__name__)


def _resolve_config(config: Optional[FathomConfig], config_file: Optional[Path], overrides) -> FathomConfig:
    if config is not None:
        if overrides or config_file is not None:
            raise TypeError("Pass either a FathomConfig or config overrides, not both")
        return config
    return load_config(config_file=config_file, **overrides)


def analyze(
    main: Node,
    symbols: Optional[Namespace] = None,
    config: Optional[FathomConfig] = None,
    config_file: Optional[Path] = None,
    source: str = "<program>",
    **overrides,
) -> AnalysisResult:
    """Analyze an already-built op tree.

    Args:
        main: Root op of the program's main body
        symbols: The program's symbol table (empty when omitted)
        config: Ready-made configuration; excludes ``config_file``/overrides
        config_file: Optional explicit config file path
        source: Label used in reports
        **overrides: Configuration overrides (e.g. verbosity=1)

    Returns:
        AnalysisResult with counters, score and diagnostics

    Raises:
        DegenerateInputError: If any counter is zero after the walk
        ConfigurationError: If configuration is invalid
    """
    resolved = _resolve_config(config, config_file, overrides)
    if symbols is None:
        symbols = Namespace("main")
    result = AnalysisRun(main, symbols, config=resolved, source=source).execute()
    logger.info(f"{source}: readability {result.score:.2f} ({result.opinion})")
    return result


def analyze_source(
    source: str,
    filename: str = "<string>",
    module: str = "__main__",
    config: Optional[FathomConfig] = None,
    config_file: Optional[Path] = None,
    **overrides,
) -> AnalysisResult:
    """Lower Python source and analyze it.

    Raises:
        ParsingError: If the source is not valid Python
        DegenerateInputError: If any counter is zero after the walk
    """
    program = lower_source(source, filename=filename, module=module)
    return analyze(
        program.main,
        program.symbols,
        config=config,
        config_file=config_file,
        source=program.source,
        **overrides,
    )


def analyze_path(
    path: Union[str, Path],
    module: Optional[str] = None,
    config: Optional[FathomConfig] = None,
    config_file: Optional[Path] = None,
    **overrides,
) -> AnalysisResult:
    """Load a Python file or JSON op-tree document and analyze it.

    Raises:
        InvalidPathError: If ``path`` is not a readable file
        ParsingError / InvalidTreeError: If the input cannot be loaded
        DegenerateInputError: If any counter is zero after the walk
    """
    program = load_path(Path(path), module=module)
    return analyze(
        program.main,
        program.symbols,
        config=config,
        config_file=config_file,
        source=program.source,
        **overrides,
    )
