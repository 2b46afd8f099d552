"""Non-fatal anomalies absorbed by the pipeline.

These are ``Warning`` subclasses: the analysis keeps going when they occur.
A run collects them and, when configured to, re-issues them through
:func:`warnings.warn` once it finishes.
"""


class FathomWarning(UserWarning):
    """Base class for Fathom warnings."""

    pass


class UnresolvableSymbolWarning(FathomWarning):
    """A symbol-table entry could not be resolved to a code object."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"Skipping unresolvable symbol '{name}': {reason}")
        self.name = name
        self.reason = reason


class UnclassifiedNodeWarning(FathomWarning):
    """Op nodes fell through to the default classification branch."""

    def __init__(self, name: str, count: int):
        noun = "node" if count == 1 else "nodes"
        super().__init__(f"{count} unclassified '{name}' {noun} counted as single tokens")
        self.name = name
        self.count = count
