"""Domain-specific exceptions for the Lumina finance core services."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class RecordNotFoundError(LookupError):
    """Raised when a transaction cannot be located."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""


class OnboardingRequiredError(PermissionError):
    """Raised when ledger features are used before onboarding completes."""
