"""Domain-specific exceptions for the budget tracker core services."""

class ValidationError(ValueError):
    """Raised when form input does not meet validation requirements."""


class RecordNotFoundError(LookupError):
    """Raised when a stored record cannot be located."""


class PersistenceError(IOError):
    """Raised when the key-value store encounters unrecoverable issues."""
