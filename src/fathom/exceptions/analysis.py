"""Analysis-related exceptions: degenerate counts, parsing, malformed trees."""

from .base import FathomError

COUNTER_NAMES = ("tokens", "expressions", "statements", "subroutines")


class AnalysisError(FathomError):
    """Base class for analysis-related errors."""
    pass


class DegenerateInputError(AnalysisError):
    """Raised when a counter is zero at scoring time.

    An empty or pathological program yields no meaningful score, so this is
    fatal to the current analysis.
    """

    def __init__(self, counter: str):
        if counter not in COUNTER_NAMES:
            raise ValueError(f"Unknown counter: {counter!r}")
        super().__init__(
            f"No {counter}; score is meaningless.",
            details={"counter": counter},
        )
        self.counter = counter


class ParsingError(AnalysisError):
    """Raised when a front end cannot parse its input."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Failed to parse {source}",
            details={"source": source, "reason": reason},
        )
        self.source = source
        self.reason = reason


class InvalidTreeError(AnalysisError):
    """Raised when a serialized op tree does not match the expected shape."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Invalid op tree at {path}",
            details={"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason
