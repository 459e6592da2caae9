"""Table constraint model objects."""

from dataclasses import dataclass
from typing import List, Optional

from dbmatic.models.base import DmConstraint, require_items, require_text
from dbmatic.models.columns import DmOrderedColumn
from dbmatic.models.enums import DmConstraintType, DmForeignKeyAction
from dbmatic.models.errors import ModelValidationError


def _ordered(columns) -> List[DmOrderedColumn]:
    return [DmOrderedColumn.coerce(c) for c in (columns or [])]


@dataclass
class DmPrimaryKeyConstraint(DmConstraint):
    """The primary key of a table, an ordered list of one or more columns."""

    schema_name: Optional[str]
    table_name: str
    constraint_name: str
    columns: List[DmOrderedColumn]

    def __post_init__(self):
        require_text(self.table_name, "table_name", "DmPrimaryKeyConstraint")
        require_text(self.constraint_name, "constraint_name", "DmPrimaryKeyConstraint")
        self.columns = _ordered(self.columns)
        require_items(self.columns, "columns", "DmPrimaryKeyConstraint")

    @property
    def constraint_type(self) -> DmConstraintType:  # noqa: D102
        return DmConstraintType.PRIMARY_KEY

    @property
    def column_names(self) -> List[str]:
        """Return the names of the key columns in key order."""
        return [c.column_name for c in self.columns]


@dataclass
class DmUniqueConstraint(DmConstraint):
    """A uniqueness constraint over an ordered list of one or more columns."""

    schema_name: Optional[str]
    table_name: str
    constraint_name: str
    columns: List[DmOrderedColumn]

    def __post_init__(self):
        require_text(self.table_name, "table_name", "DmUniqueConstraint")
        require_text(self.constraint_name, "constraint_name", "DmUniqueConstraint")
        self.columns = _ordered(self.columns)
        require_items(self.columns, "columns", "DmUniqueConstraint")

    @property
    def constraint_type(self) -> DmConstraintType:  # noqa: D102
        return DmConstraintType.UNIQUE

    @property
    def column_names(self) -> List[str]:
        """Return the names of the constrained columns in key order."""
        return [c.column_name for c in self.columns]


@dataclass
class DmCheckConstraint(DmConstraint):
    """A check constraint, optionally scoped to a single column. The expression is opaque SQL text."""

    schema_name: Optional[str]
    table_name: str
    column_name: Optional[str]
    constraint_name: str
    expression: str

    def __post_init__(self):
        require_text(self.table_name, "table_name", "DmCheckConstraint")
        require_text(self.constraint_name, "constraint_name", "DmCheckConstraint")
        require_text(self.expression, "expression", "DmCheckConstraint")

    @property
    def constraint_type(self) -> DmConstraintType:  # noqa: D102
        return DmConstraintType.CHECK


@dataclass
class DmDefaultConstraint(DmConstraint):
    """A column default. The expression is opaque SQL text."""

    schema_name: Optional[str]
    table_name: str
    column_name: str
    constraint_name: str
    expression: str

    def __post_init__(self):
        require_text(self.table_name, "table_name", "DmDefaultConstraint")
        require_text(self.column_name, "column_name", "DmDefaultConstraint")
        require_text(self.constraint_name, "constraint_name", "DmDefaultConstraint")
        require_text(self.expression, "expression", "DmDefaultConstraint")

    @property
    def constraint_type(self) -> DmConstraintType:  # noqa: D102
        return DmConstraintType.DEFAULT


@dataclass
class DmForeignKeyConstraint(DmConstraint):
    """A foreign key pairing source columns with the referenced table's columns, position by position."""

    schema_name: Optional[str]
    table_name: str
    constraint_name: str
    source_columns: List[DmOrderedColumn]
    referenced_table_name: str
    referenced_columns: List[DmOrderedColumn]
    on_delete: DmForeignKeyAction = DmForeignKeyAction.NO_ACTION
    on_update: DmForeignKeyAction = DmForeignKeyAction.NO_ACTION

    def __post_init__(self):
        require_text(self.table_name, "table_name", "DmForeignKeyConstraint")
        require_text(self.constraint_name, "constraint_name", "DmForeignKeyConstraint")
        require_text(self.referenced_table_name, "referenced_table_name", "DmForeignKeyConstraint")
        self.source_columns = _ordered(self.source_columns)
        self.referenced_columns = _ordered(self.referenced_columns)
        require_items(self.source_columns, "source_columns", "DmForeignKeyConstraint")
        require_items(self.referenced_columns, "referenced_columns", "DmForeignKeyConstraint")
        if len(self.source_columns) != len(self.referenced_columns):
            raise ModelValidationError(
                f"DmForeignKeyConstraint '{self.constraint_name}' has {len(self.source_columns)} source "
                f"column(s) but {len(self.referenced_columns)} referenced column(s)"
            )
        self.on_delete = self.on_delete or DmForeignKeyAction.NO_ACTION
        self.on_update = self.on_update or DmForeignKeyAction.NO_ACTION

    @property
    def constraint_type(self) -> DmConstraintType:  # noqa: D102
        return DmConstraintType.FOREIGN_KEY

    @property
    def source_column_names(self) -> List[str]:
        """Return the names of the referencing columns."""
        return [c.column_name for c in self.source_columns]

    @property
    def referenced_column_names(self) -> List[str]:
        """Return the names of the referenced columns."""
        return [c.column_name for c in self.referenced_columns]
