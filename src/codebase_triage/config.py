"""Configuration loading and management for Codebase Triage.

Configuration sources are merged in priority order:
    1. Defaults (defined in TriageConfig)
    2. Global config (~/.codebase-triage.toml)
    3. Project config (./codebase-triage.toml)
    4. Explicit config file
    5. Environment variables (TRIAGE_* prefix)
    6. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(timeout_seconds=120)
    >>> config.timeout_seconds
    120.0
    >>> config.thresholds.long_function_lines
    50
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "TRIAGE_"
CONFIG_FILENAME = "codebase-triage.toml"


@dataclass(frozen=True)
class ThresholdConfig:
    """Smell detection thresholds.

    Each smell has a trigger threshold and two severity breakpoints. A value
    above the trigger is ``low``, above the medium breakpoint ``medium`` and
    above the high breakpoint ``high``.

    Attributes:
        Long functions:
            long_function_lines: Line count above which a function is long
            long_function_medium: Line count for medium severity
            long_function_high: Line count for high severity

        Complexity:
            complexity: Cyclomatic complexity above which a function is too complex
            complexity_medium / complexity_high: Severity breakpoints

        Nesting:
            nesting_depth: Control-structure depth above which nesting is deep
            nesting_medium / nesting_high: Severity breakpoints

        Duplication:
            duplication_window: Sliding window size in raw lines
            duplication_min_lines: Minimum logical lines after normalization
            duplication_medium / duplication_high: Breakpoints for
                line_count * occurrence_count
    """

    long_function_lines: int = 50
    long_function_medium: int = 75
    long_function_high: int = 100

    complexity: int = 10
    complexity_medium: int = 15
    complexity_high: int = 20

    nesting_depth: int = 4
    nesting_medium: int = 5
    nesting_high: int = 6

    duplication_window: int = 10
    duplication_min_lines: int = 5
    duplication_medium: int = 50
    duplication_high: int = 100

    def __post_init__(self) -> None:
        """Validate that every breakpoint ladder is ascending."""
        ladders = [
            ("long_function", self.long_function_lines, self.long_function_medium, self.long_function_high),
            ("complexity", self.complexity, self.complexity_medium, self.complexity_high),
            ("nesting", self.nesting_depth, self.nesting_medium, self.nesting_high),
        ]
        for name, trigger, medium, high in ladders:
            if trigger < 1:
                raise InvalidConfigError(name, trigger, "trigger threshold must be at least 1")
            if not trigger <= medium <= high:
                raise InvalidConfigError(
                    name, (trigger, medium, high), "thresholds must be non-decreasing"
                )

        if self.duplication_window < 1:
            raise InvalidConfigError(
                "duplication_window", self.duplication_window, "must be at least 1"
            )
        if not 1 <= self.duplication_min_lines <= self.duplication_window:
            raise InvalidConfigError(
                "duplication_min_lines",
                self.duplication_min_lines,
                "must be between 1 and duplication_window",
            )
        if self.duplication_medium > self.duplication_high:
            raise InvalidConfigError(
                "duplication_medium", self.duplication_medium, "must not exceed duplication_high"
            )


DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class TriageConfig:
    """Configuration for an analysis run.

    Attributes:
        Pipeline:
            timeout_seconds: Wall-clock budget for one run
            cleanup_workspace: Remove the working directory after the run

        Performance tuning:
            workers: Parallel workers for per-file work (None = auto-detect)

        Discovery:
            manifest_max_depth: Directory depth searched for manifests
            content_sample_chars: Characters sniffed for content-based detection
            max_file_size_mb: Files larger than this are skipped
            follow_symlinks: Follow symbolic links during discovery

        Output control:
            verbosity: Logging verbosity level
    """

    timeout_seconds: float = 600.0
    cleanup_workspace: bool = True

    workers: Optional[int] = None

    manifest_max_depth: int = 5
    content_sample_chars: int = 1000
    max_file_size_mb: float = 10.0
    follow_symlinks: bool = False

    verbosity: Verbosity = "normal"

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.timeout_seconds <= 0:
            raise InvalidConfigError("timeout_seconds", self.timeout_seconds, "must be positive")
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.manifest_max_depth < 0:
            raise InvalidConfigError(
                "manifest_max_depth", self.manifest_max_depth, "must be non-negative"
            )
        if self.content_sample_chars < 1:
            raise InvalidConfigError(
                "content_sample_chars", self.content_sample_chars, "must be at least 1"
            )
        if self.max_file_size_mb <= 0:
            raise InvalidConfigError("max_file_size_mb", self.max_file_size_mb, "must be positive")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> TriageConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated TriageConfig instance

    Raises:
        ConfigurationError: If a config file is missing or malformed
        InvalidConfigError: If a value fails validation
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / f".{CONFIG_FILENAME}"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path.cwd() / CONFIG_FILENAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    thresholds = merged.pop("thresholds", None)
    if isinstance(thresholds, dict):
        try:
            merged["thresholds"] = ThresholdConfig(**thresholds)
        except TypeError as e:
            raise ConfigurationError(f"Invalid [thresholds] config: {e}")
    elif isinstance(thresholds, ThresholdConfig):
        merged["thresholds"] = thresholds

    if "timeout_seconds" in merged:
        merged["timeout_seconds"] = float(merged["timeout_seconds"])

    try:
        return TriageConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from TRIAGE_* environment variables.

    Supported environment variables mirror the scalar TriageConfig fields,
    e.g. TRIAGE_TIMEOUT_SECONDS, TRIAGE_WORKERS, TRIAGE_FOLLOW_SYMLINKS.
    """
    type_hints = get_type_hints(TriageConfig)

    result: dict[str, Any] = {}

    for config_field in fields(TriageConfig):
        env_key = f"{ENV_PREFIX}{config_field.name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(config_field.name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(config_field.name, env_value, str(e))
        if parsed is not None:
            result[config_field.name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns None for types that cannot be expressed in an env var.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]

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
    """Load a TOML file and return the parsed dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
