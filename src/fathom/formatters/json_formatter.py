"""JSON formatter for Fathom."""

import json

from ..analysis import AnalysisResult
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render the result as JSON. The trace is included only at verbosity 2+."""

    def render(self, result: AnalysisResult) -> None:
        print(self.format(result))

    def format(self, result: AnalysisResult) -> str:
        data = result.to_dict()
        if self.verbosity < 2:
            data.pop("trace")
        return json.dumps(data, indent=2)
