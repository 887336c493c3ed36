"""Analysis-related exceptions: malformed records, data issues."""

from typing import Dict, Optional

from .base import EvolutionInsightError


class AnalysisError(EvolutionInsightError):
    """Base class for analysis-related errors."""
    pass


class MalformedInputError(AnalysisError):
    """Raised when a single commit, file or function record lacks required fields.

    Analyses catch this per record, log it, and carry on with the rest.
    """

    def __init__(self, subject: str, reason: str):
        super().__init__(
            f"Malformed input for {subject}",
            details={"subject": subject, "reason": reason},
        )
        self.subject = subject
        self.reason = reason


class InsufficientDataError(AnalysisError):
    """Raised when there's not enough data for analysis."""

    def __init__(self, reason: str, minimum_required: Optional[int] = None):
        details: Dict[str, str] = {"reason": reason}
        if minimum_required is not None:
            details["minimum_required"] = str(minimum_required)

        super().__init__(f"Insufficient data for analysis: {reason}", details=details)
        self.reason = reason
        self.minimum_required = minimum_required
