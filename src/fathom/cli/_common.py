"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import FathomConfig, load_config

console = Console(stderr=True)


def resolve_config(
    config: Optional[Path] = None,
    verbose: int = 0,
    fmt: Optional[str] = None,
    no_recurse: bool = False,
    fail_above: Optional[float] = None,
    emit_warnings: bool = False,
) -> FathomConfig:
    """Build configuration from CLI options. Unset flags leave file/env values alone."""
    overrides: dict = {}
    if verbose:
        overrides["verbosity"] = verbose
    if fmt is not None:
        overrides["output_format"] = fmt
    if no_recurse:
        overrides["recurse_namespaces"] = False
    if fail_above is not None:
        overrides["fail_above"] = fail_above
    if emit_warnings:
        overrides["emit_warnings"] = True
    return load_config(config_file=config, **overrides)
