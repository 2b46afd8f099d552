"""Configuration loading and management for Fathom.

Configuration sources are merged in priority order:
    1. Defaults (defined in FathomConfig)
    2. Global config (~/.fathom.toml)
    3. Project config (./fathom.toml)
    4. Explicit config file
    5. Environment variables (FATHOM_* prefix)
    6. Overrides passed as kwargs (typically from the CLI)

Example:
    >>> config = load_config(verbose=True)
    >>> config.verbosity
    1
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

OutputFormat = Literal["text", "rich", "json"]

OUTPUT_FORMATS = ("text", "rich", "json")


@dataclass(frozen=True)
class FathomConfig:
    """Settings for one analysis run.

    Attributes:
        verbosity: 0 = silent, 1 = report skipped re-exported subroutines,
            2 or more = also record a per-node trace during traversal
        recurse_namespaces: Collect subroutines from nested namespaces, not
            only the top-level one. Scanning always covers the whole table.
        emit_warnings: Re-issue collected anomalies through ``warnings.warn``
        output_format: Report layout used by the CLI
        fail_above: CLI exits non-zero when the score exceeds this value
    """

    verbosity: int = 0
    recurse_namespaces: bool = True
    emit_warnings: bool = False
    output_format: OutputFormat = "text"
    fail_above: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if isinstance(self.verbosity, bool) or not isinstance(self.verbosity, int):
            raise InvalidConfigError("verbosity", self.verbosity, "must be an integer")
        if self.verbosity < 0:
            raise InvalidConfigError("verbosity", self.verbosity, "must be non-negative")
        if self.output_format not in OUTPUT_FORMATS:
            raise InvalidConfigError(
                "output_format",
                self.output_format,
                f"must be one of {', '.join(OUTPUT_FORMATS)}",
            )
        if self.fail_above is not None and self.fail_above < 0:
            raise InvalidConfigError("fail_above", self.fail_above, "must be non-negative")

    @property
    def reports_skipped(self) -> bool:
        return self.verbosity >= 1

    @property
    def traces_nodes(self) -> bool:
        return self.verbosity >= 2


def load_config(config_file: Optional[Path] = None, **overrides) -> FathomConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides. ``verbose=True`` raises verbosity to
            at least 1; ``None`` values are ignored.

    Returns:
        Validated FathomConfig instance

    Raises:
        ConfigurationError: If a config file is missing or unreadable, or an
            unknown key is given
        InvalidConfigError: If a value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".fathom.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "fathom.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    overrides = {k: v for k, v in overrides.items() if v is not None}
    if "verbose" in overrides:
        if overrides.pop("verbose"):
            overrides["verbosity"] = max(1, overrides.get("verbosity", 0))

    merged.update(overrides)

    unknown = sorted(set(merged) - {f.name for f in fields(FathomConfig)})
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

    return FathomConfig(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from FATHOM_* environment variables.

    Supported environment variables:
        FATHOM_VERBOSITY: int
        FATHOM_RECURSE_NAMESPACES: bool (true/false/1/0)
        FATHOM_EMIT_WARNINGS: bool
        FATHOM_OUTPUT_FORMAT: text/rich/json
        FATHOM_FAIL_ABOVE: float

    Returns:
        Dict of field_name -> parsed_value for any FATHOM_* vars found.
    """
    type_hints = get_type_hints(FathomConfig)

    result: dict[str, Any] = {}

    for field_name in FathomConfig.__dataclass_fields__:
        env_key = f"FATHOM_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    A ``[fathom]`` table is used when present, so the settings can live in a
    shared file; otherwise the top-level table is the configuration.
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    with open(path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("fathom")
    if isinstance(section, dict):
        return section
    return data
