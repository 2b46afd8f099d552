"""Plain text formatter: the classic five-line readability report."""

from ..analysis import AnalysisResult, count_label
from .base import BaseFormatter


class TextFormatter(BaseFormatter):
    """Render counts and the verdict as plain lines.

        4     tokens
        1     expression
        1     statement
        1     subroutine
        readability is 2.56 (very readable)
    """

    def render(self, result: AnalysisResult) -> None:
        print(self.format(result))

    def format(self, result: AnalysisResult) -> str:
        lines = []
        if self.verbosity >= 1:
            lines.extend(f"Skipping imported sub '{name}'" for name in result.skipped)

        readability = result.readability
        for counter, count in readability.counts():
            lines.append(f"{count:<5d} {count_label(count, counter)}")
        lines.append(f"readability is {readability.score:.2f} ({readability.opinion})")
        return "\n".join(lines)
