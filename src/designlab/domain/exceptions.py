"""
Domain exceptions for Design Lab.

Every failure the orchestrator can observe is a subclass of DesignLabError.
Whether a failure is fatal or recorded per model is decided by the
orchestrator, not by the exception itself.
"""


class DesignLabError(Exception):
    """Base class for all Design Lab errors."""


class CompletionTimeout(DesignLabError):
    """
    Raised when a session never stabilized within the wait ceiling.

    Reported as a failure for the affected model only.
    """

    def __init__(self, session_id: str, elapsed: float, polls: int):
        """
        Args:
            session_id: Session that was being monitored
            elapsed: Seconds spent waiting before giving up
            polls: Number of status observations made
        """
        super().__init__(
            f"Session {session_id} did not complete within {elapsed:.1f}s "
            f"({polls} polls)"
        )
        self.session_id = session_id
        self.elapsed = elapsed
        self.polls = polls


class CompletionCancelled(DesignLabError):
    """Raised when the caller cancels a wait. Always propagated."""

    def __init__(self, session_id: str):
        super().__init__(f"Waiting for session {session_id} was cancelled")
        self.session_id = session_id


class IsolationViolation(DesignLabError):
    """
    Raised when an agent touches another candidate's artifacts.

    Never converted into a silent no-op.
    """

    def __init__(self, message: str, path: str | None = None, owner_id: str | None = None):
        super().__init__(f"Design isolation violation: {message}")
        self.path = path
        self.owner_id = owner_id


class SchemaValidationError(DesignLabError):
    """Raised when an extracted payload does not match its schema."""

    def __init__(self, message: str, errors: list[str] | None = None):
        """
        Args:
            message: Summary of the failure
            errors: Individual validation messages, one per failing field
        """
        super().__init__(message)
        self.errors = errors or []


class ExtractionError(DesignLabError):
    """Raised when no JSON value can be pulled out of agent output."""

    def __init__(self, message: str, preview: str):
        super().__init__(f"{message}\n\nText preview: {preview}")
        self.preview = preview


class DuplicateRunError(DesignLabError):
    """Raised when the run directory already exists. Fatal for the run."""

    def __init__(self, run_dir: str):
        super().__init__(
            f"Design lab already exists at {run_dir}. "
            "Choose a different topic or remove the existing directory."
        )
        self.run_dir = run_dir


class AgentInvocationError(DesignLabError):
    """Raised when a session cannot be created or a prompt cannot be sent."""

    def __init__(self, message: str, model: str | None = None):
        super().__init__(message)
        self.model = model


class ConfigurationError(DesignLabError):
    """Raised when configuration is missing or invalid. Fatal for the run."""
