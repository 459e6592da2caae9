"""Defines errors raised while constructing schema model objects."""


class ModelValidationError(ValueError):
    """Raised when a schema model object is constructed with missing or inconsistent values."""

    pass
