"""Exception hierarchy for Evolution Insight."""

from .analysis import (
    AnalysisError,
    InsufficientDataError,
    MalformedInputError,
)
from .base import EvolutionInsightError
from .collaborators import CollaboratorError, CollaboratorUnavailableError
from .config import ConfigurationError, InvalidConfigError

__all__ = [
    "EvolutionInsightError",
    "AnalysisError",
    "InsufficientDataError",
    "MalformedInputError",
    "CollaboratorError",
    "CollaboratorUnavailableError",
    "ConfigurationError",
    "InvalidConfigError",
]
