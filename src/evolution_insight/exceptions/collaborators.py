"""Collaborator exceptions: git subprocess, GitHub API, TODO inventory."""

from .base import EvolutionInsightError


class CollaboratorError(EvolutionInsightError):
    """Base class for errors raised by data-fetching collaborators."""

    pass


class CollaboratorUnavailableError(CollaboratorError):
    """Raised when a collaborator cannot deliver data for one request.

    The engine catches this per commit and omits the affected enrichment.
    """

    def __init__(self, collaborator: str, reason: str):
        super().__init__(
            f"{collaborator} unavailable",
            details={"collaborator": collaborator, "reason": reason},
        )
        self.collaborator = collaborator
        self.reason = reason
