"""Configuration loading and management for Evolution Insight.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in the dataclasses below)
    2. Global config (~/.evolution-insight.toml)
    3. Project config (./evolution-insight.toml)
    4. Explicit config file
    5. Environment variables (EVOLUTION_* prefix)
    6. Overrides (passed as kwargs)

Every threshold is validated when the dataclass is constructed, so a bad
weight or a negative window is rejected before any commit is processed.

Example:
    >>> config = load_config(verbose=True, git_max_commits=500)
    >>> config.verbosity
    'verbose'
    >>> config.ownership.window_days
    14
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

_WEIGHT_TOLERANCE = 0.01


def _require_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise InvalidConfigError(name, value, "must be non-negative")


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise InvalidConfigError(name, value, "must be positive")


def _require_unit(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise InvalidConfigError(name, value, "must be between 0.0 and 1.0")


def _require_weights_sum(names: list[str], values: list[float]) -> None:
    for name, value in zip(names, values):
        _require_non_negative(name, value)
    total = sum(values)
    if abs(total - 1.0) > _WEIGHT_TOLERANCE:
        raise InvalidConfigError("+".join(names), f"{total:.3f}", "weights must sum to 1.0")


# Function-declaration patterns for brace-delimited languages. Group 1 is the name.
DEFAULT_FUNCTION_PATTERNS: tuple[str, ...] = (
    r"\bfunction\s*\*?\s+(\w+)",  # JavaScript, TypeScript, PHP
    r"\bfunc\s+(?:\([^)]*\)\s*)?(\w+)",  # Go, including methods with receivers
    r"\bfn\s+(\w+)",  # Rust
    r"\bfun\s+(?:<[^>]*>\s*)?(?:\w+\.)?(\w+)",  # Kotlin
)

DEFAULT_SOURCE_EXTENSIONS: tuple[str, ...] = (
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
    ".ts",
    ".tsx",
    ".php",
    ".go",
    ".rs",
    ".kt",
)


@dataclass(frozen=True)
class ComplexityConfig:
    """Per-commit function complexity flags.

    Attributes:
        significant_increase_threshold: increase must exceed this ...
        significant_nesting_threshold: ... and nesting change must exceed this
            for ``is_significant_increase``
        refactor_increase_threshold: increase above this alone flags a
            refactoring candidate
        refactor_moderate_increase_threshold: a moderate increase above this ...
        refactor_nesting_threshold: ... combined with nesting change above this
            also flags a refactoring candidate
        function_patterns: regexes detecting a function declaration (group 1 = name)
        source_extensions: file extensions scanned for functions
    """

    significant_increase_threshold: int = 3
    significant_nesting_threshold: int = 1
    refactor_increase_threshold: int = 5
    refactor_moderate_increase_threshold: int = 3
    refactor_nesting_threshold: int = 0
    function_patterns: tuple[str, ...] = DEFAULT_FUNCTION_PATTERNS
    source_extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS

    def __post_init__(self) -> None:
        if not self.function_patterns:
            raise InvalidConfigError("function_patterns", self.function_patterns, "must not be empty")
        # Lists arrive from TOML; keep the instance hashable.
        object.__setattr__(self, "function_patterns", tuple(self.function_patterns))
        object.__setattr__(
            self, "source_extensions", tuple(ext.lower() for ext in self.source_extensions)
        )


@dataclass(frozen=True)
class TrendConfig:
    """Complexity trend classification."""

    growth_rate_threshold: float = 1.5
    min_history: int = 2

    def __post_init__(self) -> None:
        if self.min_history < 2:
            raise InvalidConfigError("min_history", self.min_history, "must be at least 2")


@dataclass(frozen=True)
class OwnershipConfig:
    """Ownership drift detection and stability scoring.

    Attributes:
        window_days: sliding window for rapid ownership change detection
        rapid_change_threshold: ownership changes inside one window that
            count as a rapid-change window
        min_commits: commits a file needs before it gets a stability score
        author_count_weight / change_frequency_weight / ownership_duration_weight:
            stability score weights (sum = 1.0)
        duration_cap_days: average ownership duration is normalized against this
        rapid_change_penalty: flat penalty when any rapid-change window exists
        high_stability_threshold / medium_stability_threshold: classification cut-offs
    """

    window_days: float = 14
    rapid_change_threshold: int = 3
    min_commits: int = 3
    author_count_weight: float = 0.3
    change_frequency_weight: float = 0.4
    ownership_duration_weight: float = 0.3
    duration_cap_days: float = 90
    rapid_change_penalty: float = 0.3
    high_stability_threshold: float = 0.8
    medium_stability_threshold: float = 0.5

    def __post_init__(self) -> None:
        _require_positive("window_days", self.window_days)
        if self.rapid_change_threshold < 1:
            raise InvalidConfigError(
                "rapid_change_threshold", self.rapid_change_threshold, "must be at least 1"
            )
        if self.min_commits < 1:
            raise InvalidConfigError("min_commits", self.min_commits, "must be at least 1")
        _require_weights_sum(
            ["author_count_weight", "change_frequency_weight", "ownership_duration_weight"],
            [
                self.author_count_weight,
                self.change_frequency_weight,
                self.ownership_duration_weight,
            ],
        )
        _require_positive("duration_cap_days", self.duration_cap_days)
        _require_unit("rapid_change_penalty", self.rapid_change_penalty)
        _require_unit("high_stability_threshold", self.high_stability_threshold)
        _require_unit("medium_stability_threshold", self.medium_stability_threshold)
        if self.medium_stability_threshold > self.high_stability_threshold:
            raise InvalidConfigError(
                "medium_stability_threshold",
                self.medium_stability_threshold,
                "must not exceed high_stability_threshold",
            )

    @property
    def window_seconds(self) -> float:
        return self.window_days * 86400


@dataclass(frozen=True)
class RiskConfig:
    """File/function risk scoring on a 0-10 scale."""

    churn_divisor: float = 2.0
    complexity_divisor: float = 5.0
    churn_weight: float = 0.4
    complexity_weight: float = 0.6
    trend_multiplier: float = 2.0
    ownership_weight: float = 0.0
    max_score: float = 10.0
    high_risk_threshold: float = 7.0
    medium_risk_threshold: float = 4.0
    refactor_score_threshold: float = 7.0
    refactor_complexity_threshold: float = 7.0
    refactor_churn_threshold: float = 5.0

    def __post_init__(self) -> None:
        _require_positive("churn_divisor", self.churn_divisor)
        _require_positive("complexity_divisor", self.complexity_divisor)
        _require_positive("max_score", self.max_score)
        _require_non_negative("trend_multiplier", self.trend_multiplier)
        _require_weights_sum(
            ["churn_weight", "complexity_weight", "ownership_weight"],
            [self.churn_weight, self.complexity_weight, self.ownership_weight],
        )
        for name in (
            "high_risk_threshold",
            "medium_risk_threshold",
            "refactor_score_threshold",
            "refactor_complexity_threshold",
            "refactor_churn_threshold",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= self.max_score:
                raise InvalidConfigError(name, value, f"must be between 0 and {self.max_score}")
        if self.medium_risk_threshold > self.high_risk_threshold:
            raise InvalidConfigError(
                "medium_risk_threshold",
                self.medium_risk_threshold,
                "must not exceed high_risk_threshold",
            )


@dataclass(frozen=True)
class BurnoutConfig:
    """Contributor burnout risk from commit-time patterns.

    Off-hours ranges wrap midnight when ``off_hours_start >= off_hours_end``
    (the default 22:00-06:00 does).
    """

    off_hours_start: int = 22
    off_hours_end: int = 6
    include_weekends: bool = True
    min_commits: int = 5
    off_hours_weight: float = 0.6
    weekend_weight: float = 0.4
    high_risk_threshold: float = 0.6
    medium_risk_threshold: float = 0.3
    off_hours_pattern_threshold: float = 0.3
    weekend_pattern_threshold: float = 0.2
    late_night_streak_days: int = 3

    def __post_init__(self) -> None:
        for name in ("off_hours_start", "off_hours_end"):
            value = getattr(self, name)
            if not 0 <= value <= 24:
                raise InvalidConfigError(name, value, "must be an hour between 0 and 24")
        if self.off_hours_start == self.off_hours_end:
            raise InvalidConfigError(
                "off_hours_end", self.off_hours_end, "off-hours range must not be empty"
            )
        if self.min_commits < 1:
            raise InvalidConfigError("min_commits", self.min_commits, "must be at least 1")
        _require_weights_sum(
            ["off_hours_weight", "weekend_weight"], [self.off_hours_weight, self.weekend_weight]
        )
        for name in (
            "high_risk_threshold",
            "medium_risk_threshold",
            "off_hours_pattern_threshold",
            "weekend_pattern_threshold",
        ):
            _require_unit(name, getattr(self, name))
        if self.medium_risk_threshold > self.high_risk_threshold:
            raise InvalidConfigError(
                "medium_risk_threshold",
                self.medium_risk_threshold,
                "must not exceed high_risk_threshold",
            )
        if self.late_night_streak_days < 2:
            raise InvalidConfigError(
                "late_night_streak_days", self.late_night_streak_days, "must be at least 2"
            )

    def is_off_hours(self, hour: int) -> bool:
        if self.off_hours_start < self.off_hours_end:
            return self.off_hours_start <= hour < self.off_hours_end
        return hour >= self.off_hours_start or hour < self.off_hours_end


@dataclass(frozen=True)
class FeatureDeathConfig:
    """TODO-age heuristic for abandoned features."""

    stale_threshold_days: float = 90
    high_risk_threshold: float = 0.7
    medium_risk_threshold: float = 0.4

    def __post_init__(self) -> None:
        _require_positive("stale_threshold_days", self.stale_threshold_days)
        _require_unit("high_risk_threshold", self.high_risk_threshold)
        _require_unit("medium_risk_threshold", self.medium_risk_threshold)
        if self.medium_risk_threshold > self.high_risk_threshold:
            raise InvalidConfigError(
                "medium_risk_threshold",
                self.medium_risk_threshold,
                "must not exceed high_risk_threshold",
            )


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for a full analysis run.

    Attributes:
        Git integration:
            git_max_commits: Maximum commits to read from git log (0 = unlimited)
            fetch_diffs: Fetch per-commit diffs for complexity analysis

        Collaborators:
            max_concurrent_fetches: Concurrent per-commit fetches
            github_repo: ``owner/name`` for pull-request enrichment (None = skip)
            github_token_env: Environment variable holding the GitHub token
            cache_dir: Directory for the pull-request cache
            cache_ttl_hours: Pull-request cache time-to-live

        Output control:
            verbosity: Logging verbosity level

        Algorithm thresholds are grouped in nested configs.
    """

    git_max_commits: int = 5000
    fetch_diffs: bool = True

    max_concurrent_fetches: int = 8
    github_repo: Optional[str] = None
    github_token_env: str = "GITHUB_TOKEN"
    cache_dir: str = ".evolution-cache"
    cache_ttl_hours: int = 24

    verbosity: Verbosity = "normal"

    complexity: ComplexityConfig = field(default_factory=ComplexityConfig)
    trends: TrendConfig = field(default_factory=TrendConfig)
    ownership: OwnershipConfig = field(default_factory=OwnershipConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    burnout: BurnoutConfig = field(default_factory=BurnoutConfig)
    feature_death: FeatureDeathConfig = field(default_factory=FeatureDeathConfig)

    def __post_init__(self) -> None:
        if self.git_max_commits < 0:
            raise InvalidConfigError("git_max_commits", self.git_max_commits, "must be non-negative")
        if self.max_concurrent_fetches < 1:
            raise InvalidConfigError(
                "max_concurrent_fetches", self.max_concurrent_fetches, "must be at least 1"
            )
        if self.cache_ttl_hours < 0:
            raise InvalidConfigError("cache_ttl_hours", self.cache_ttl_hours, "must be non-negative")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError("verbosity", self.verbosity, "must be quiet, normal or verbose")
        if self.github_repo is not None and self.github_repo.count("/") != 1:
            raise InvalidConfigError("github_repo", self.github_repo, "expected owner/name")

    @property
    def cache_ttl_seconds(self) -> int:
        return self.cache_ttl_hours * 3600


# Nested TOML tables -> dataclass
_SECTIONS: dict[str, type] = {
    "complexity": ComplexityConfig,
    "trends": TrendConfig,
    "ownership": OwnershipConfig,
    "risk": RiskConfig,
    "burnout": BurnoutConfig,
    "feature_death": FeatureDeathConfig,
}


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). Nested
            sections may be passed as dicts or as config instances.

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is missing or unreadable
        InvalidConfigError: If a value fails validation
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".evolution-insight.toml"
    if global_config.exists():
        _merge(merged, _load_toml_file(global_config))

    project_config = Path.cwd() / "evolution-insight.toml"
    if project_config.exists():
        _merge(merged, _load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge(merged, _load_toml_file(config_file))

    _merge(merged, _load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    _merge(merged, overrides)

    for section, config_cls in _SECTIONS.items():
        value = merged.pop(section, None)
        if value is None:
            continue
        if isinstance(value, config_cls):
            merged[section] = value
        elif isinstance(value, dict):
            try:
                merged[section] = config_cls(**value)
            except TypeError as e:
                raise ConfigurationError(f"Invalid [{section}] config: {e}")
        else:
            raise ConfigurationError(f"Invalid [{section}] config: expected a table")

    try:
        return AnalysisConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    """Merge ``source`` into ``target``; nested section tables merge key by key."""
    for key, value in source.items():
        if key in _SECTIONS and isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key] = {**target[key], **value}
        else:
            target[key] = value


def _load_env_vars() -> dict[str, Any]:
    """Load top-level settings from EVOLUTION_* environment variables.

    Example: ``EVOLUTION_GIT_MAX_COMMITS=200``, ``EVOLUTION_FETCH_DIFFS=false``,
    ``EVOLUTION_GITHUB_REPO=owner/name``. Nested sections are file-only.
    """
    type_hints = get_type_hints(AnalysisConfig)
    result: dict[str, Any] = {}

    for config_field in fields(AnalysisConfig):
        if config_field.name in _SECTIONS:
            continue
        env_key = f"EVOLUTION_{config_field.name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hints[config_field.name])
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")
        if parsed is not None:
            result[config_field.name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the field's type."""
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none = [t for t in args if t is not type(None)]
        if non_none:
            type_hint = non_none[0]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or getattr(type_hint, "__origin__", None) is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")


DEFAULT_CONFIG = AnalysisConfig()
