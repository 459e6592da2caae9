"""The provider neutral schema model: tables, columns, constraints, indexes and views."""

from dbmatic.models.base import DmConstraint
from dbmatic.models.columns import DmColumn, DmOrderedColumn
from dbmatic.models.constraints import (
    DmCheckConstraint,
    DmDefaultConstraint,
    DmForeignKeyConstraint,
    DmPrimaryKeyConstraint,
    DmUniqueConstraint,
)
from dbmatic.models.enums import DmColumnOrder, DmConstraintType, DmForeignKeyAction, ProviderType
from dbmatic.models.errors import ModelValidationError
from dbmatic.models.tables import DmIndex, DmTable, DmView

__all__ = [
    "DmCheckConstraint",
    "DmColumn",
    "DmColumnOrder",
    "DmConstraint",
    "DmConstraintType",
    "DmDefaultConstraint",
    "DmForeignKeyAction",
    "DmForeignKeyConstraint",
    "DmIndex",
    "DmOrderedColumn",
    "DmPrimaryKeyConstraint",
    "DmTable",
    "DmUniqueConstraint",
    "DmView",
    "ModelValidationError",
    "ProviderType",
]
