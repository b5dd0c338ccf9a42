"""Custom exception classes."""


class ValidationError(Exception):
    """Raised when submitted registration data fails validation."""
    pass


class StorageError(Exception):
    """Raised when a JSON store cannot be written."""
    pass
