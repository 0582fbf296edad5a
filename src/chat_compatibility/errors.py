"""Error types for an analysis run.

Every failure derives from AnalysisError and carries a short `kind` used in logs.
Callers facing users collapse all of them to USER_RETRY_MESSAGE.
"""

USER_RETRY_MESSAGE = "Something went wrong while analyzing your chat. Please try again."


class AnalysisError(Exception):
    kind = "analysis"


class IntakeReadError(AnalysisError):
    """A selected file could not be read. Raised before any remote call."""
    kind = "intake_read"

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Could not read {filename!r}: {reason}")


class EmptyResponseError(AnalysisError):
    kind = "empty_response"


class MalformedResponseError(AnalysisError):
    """Response text is not JSON, or does not match the result schema."""
    kind = "malformed_response"


class TransportError(AnalysisError):
    kind = "transport"


class AnalysisInProgressError(AnalysisError):
    kind = "in_progress"
