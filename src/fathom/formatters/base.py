"""Base formatter interface for Fathom output rendering."""

from abc import ABC, abstractmethod

from ..analysis import AnalysisResult


class BaseFormatter(ABC):
    """Abstract base class for output formatters.

    ``verbosity`` follows the config: 1 adds the skipped re-exported
    subroutines, 2 adds the per-op trace where the format supports it.
    """

    def __init__(self, verbosity: int = 0):
        self.verbosity = verbosity

    @abstractmethod
    def render(self, result: AnalysisResult) -> None:
        """Render the result to stdout."""

    @abstractmethod
    def format(self, result: AnalysisResult) -> str:
        """Return formatted string representation of the result."""
