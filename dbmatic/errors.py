"""Defines errors shared across dbmatic packages."""


class TemplateError(Exception):
    """Raised when parsing a catalog SQL template fails."""

    pass


class MissingTemplateArgumentError(TemplateError):
    """Raised when rendering a template that references an argument that was not supplied."""

    pass
