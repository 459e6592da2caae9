"""Shared validation helpers and the abstract constraint type of the schema model."""

from abc import ABC, abstractmethod

from dbmatic.models.enums import DmConstraintType
from dbmatic.models.errors import ModelValidationError


def require_text(value, field_name: str, owner: str):
    """Raise if a required text field is missing or blank.

    :param value: the value to check
    :param field_name: the name of the field being checked, used in the error message
    :param owner: the name of the model type being constructed, used in the error message
    :raises: ModelValidationError
    """
    if value is None or not isinstance(value, str) or not value.strip():
        raise ModelValidationError(f"{owner} requires a non-empty {field_name}")


def require_items(values, field_name: str, owner: str):
    """Raise if a required list is missing or empty."""
    if not values:
        raise ModelValidationError(f"{owner} requires at least one entry in {field_name}")


class DmConstraint(ABC):
    """Base of every table constraint, each carries a name and a type discriminant."""

    constraint_name: str

    @property
    @abstractmethod
    def constraint_type(self) -> DmConstraintType:
        """Return the discriminant of the concrete constraint."""
        pass  # pragma: no cover
