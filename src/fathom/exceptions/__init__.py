"""Exception hierarchy for Fathom."""

from .analysis import (
    AnalysisError,
    DegenerateInputError,
    InvalidTreeError,
    ParsingError,
)
from .base import FathomError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .warnings import (
    FathomWarning,
    UnclassifiedNodeWarning,
    UnresolvableSymbolWarning,
)

__all__ = [
    "FathomError",
    "AnalysisError",
    "DegenerateInputError",
    "ParsingError",
    "InvalidTreeError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "FathomWarning",
    "UnresolvableSymbolWarning",
    "UnclassifiedNodeWarning",
]
