"""Domain exceptions for the scenario engine."""


class ValidationError(Exception):
    """User-recoverable rejection of an action; message is shown unchanged."""

    def __init__(self, code: str, message: str | None = None):
        self.code = code
        self.message = message or code
        super().__init__(self.message)


class AuthoringError(Exception):
    """Content defect in a scenario document."""


class ScenarioDocumentError(AuthoringError):
    """Raised when a scenario document cannot be normalized at all."""


class ScenarioNotFoundError(LookupError):
    """Raised when no scenario document exists for an id."""


class RunNotFoundError(LookupError):
    """Raised when a run id is unknown to the registry."""


class PersistenceWarning(UserWarning):
    """Non-fatal failure of an outbound store call."""


# User-facing messages
SELECTION_REQUIRED = "Please select an option before continuing."
CONFIDENCE_REQUIRED = "Please rate your confidence before continuing."
CONFIDENCE_OUT_OF_RANGE = "Confidence must be a whole number between 1 and 5."
REFLECTION_TOO_SHORT = "Reflection must be at least {min_words} words."
