"""Public API for Evolution Insight.

Example:
    >>> from evolution_insight import analyze_repository
    >>>
    >>> report = analyze_repository("/path/to/repo")
    >>> report.risk.summary.high_risk
    3
    >>>
    >>> # With customization
    >>> report = analyze_repository(
    ...     "/path/to/repo",
    ...     git_max_commits=500,
    ...     fetch_diffs=False,
    ... )
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Optional

from .collaborators import (
    GitCommitDataSource,
    GitHubPullRequestSource,
    JsonFilePersistence,
    PullRequestCache,
    TodoScanner,
)
from .config import AnalysisConfig, load_config
from .engine import EvolutionEngine, EvolutionReport
from .exceptions import InsufficientDataError
from .logging_config import get_logger, setup_logging
from .temporal import GitExtractor

logger = get_logger(__name__)


def build_engine(path: Path, config: AnalysisConfig, github_repo: Optional[str]) -> EvolutionEngine:
    """Wire the default collaborators for a local checkout."""
    pr_source = None
    if github_repo:
        token = os.environ.get(config.github_token_env)
        cache = PullRequestCache(JsonFilePersistence(path / config.cache_dir, config.cache_ttl_seconds))
        pr_source = GitHubPullRequestSource(
            github_repo,
            token=token,
            cache=cache,
            max_concurrent=config.max_concurrent_fetches,
        )

    return EvolutionEngine(
        config=config,
        commit_source=GitCommitDataSource(str(path)),
        pr_source=pr_source,
        todo_source=TodoScanner(path, extensions=config.complexity.source_extensions),
    )


def analyze_repository(
    path: str = ".",
    config_file: Optional[Path] = None,
    **overrides,
) -> EvolutionReport:
    """Analyze a git repository's history and return the full report.

    1. Load configuration (auto-discover TOML + apply overrides)
    2. Read ``git log`` into normalized commits
    3. Enrich commits (stats, diffs, pull requests) concurrently
    4. Run every analysis

    Args:
        path: Path to the repository root (default: current directory)
        config_file: Optional explicit config file path
        **overrides: Configuration overrides (e.g., verbose=True, git_max_commits=500)

    Raises:
        ConfigurationError: If configuration is invalid
        FileNotFoundError: If path doesn't exist
        InsufficientDataError: If the path has no readable git history
    """
    root = Path(path).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Not a directory: {path}")

    config = load_config(config_file=config_file, **overrides)
    setup_logging(config.verbosity)
    logger.info(f"Starting analysis of {root}")

    extractor = GitExtractor(str(root), max_commits=config.git_max_commits)
    history = extractor.extract()
    if history is None:
        raise InsufficientDataError(f"no git history found at {root}", minimum_required=1)
    logger.info(f"Read {history.total_commits} commits spanning {history.span_days} days")

    github_repo = config.github_repo or extractor.remote_github_repo()
    engine = build_engine(root, config, github_repo)
    return asyncio.run(engine.run(history.commits))
