"""Table, index and view model objects."""

import copy
from dataclasses import dataclass, field
from typing import List, Optional

from dbmatic.models.base import require_items, require_text
from dbmatic.models.columns import DmColumn, DmOrderedColumn
from dbmatic.models.constraints import (
    DmCheckConstraint,
    DmDefaultConstraint,
    DmForeignKeyConstraint,
    DmPrimaryKeyConstraint,
    DmUniqueConstraint,
)


@dataclass
class DmIndex:
    """An index over an ordered list of one or more columns."""

    schema_name: Optional[str]
    table_name: str
    index_name: str
    columns: List[DmOrderedColumn]
    is_unique: bool = False

    def __post_init__(self):
        require_text(self.table_name, "table_name", "DmIndex")
        require_text(self.index_name, "index_name", "DmIndex")
        self.columns = [DmOrderedColumn.coerce(c) for c in (self.columns or [])]
        require_items(self.columns, "columns", "DmIndex")

    @property
    def column_names(self) -> List[str]:
        """Return the names of the indexed columns in key order."""
        return [c.column_name for c in self.columns]


@dataclass
class DmView:
    """A view and the SELECT statement that defines it."""

    schema_name: Optional[str]
    view_name: str
    definition: str

    def __post_init__(self):
        require_text(self.view_name, "view_name", "DmView")
        require_text(self.definition, "definition", "DmView")


@dataclass
class DmTable:
    """A table and everything it owns: columns, its primary key, constraints and indexes."""

    schema_name: Optional[str]
    table_name: str
    columns: List[DmColumn] = field(default_factory=list)
    primary_key_constraint: Optional[DmPrimaryKeyConstraint] = None
    check_constraints: List[DmCheckConstraint] = field(default_factory=list)
    default_constraints: List[DmDefaultConstraint] = field(default_factory=list)
    unique_constraints: List[DmUniqueConstraint] = field(default_factory=list)
    foreign_key_constraints: List[DmForeignKeyConstraint] = field(default_factory=list)
    indexes: List[DmIndex] = field(default_factory=list)

    def __post_init__(self):
        require_text(self.table_name, "table_name", "DmTable")
        self.columns = list(self.columns or [])
        self.check_constraints = list(self.check_constraints or [])
        self.default_constraints = list(self.default_constraints or [])
        self.unique_constraints = list(self.unique_constraints or [])
        self.foreign_key_constraints = list(self.foreign_key_constraints or [])
        self.indexes = list(self.indexes or [])

    def get_column(self, column_name: str) -> Optional[DmColumn]:
        """Find a column by name, ignoring case.

        :param column_name: the column to find
        :returns: the column or None
        """
        wanted = column_name.lower()
        return next((c for c in self.columns if c.column_name.lower() == wanted), None)

    @property
    def column_names(self) -> List[str]:
        """Return the column names in declaration order."""
        return [c.column_name for c in self.columns]

    def copy(self) -> "DmTable":
        """Return a deep copy, leaving this table untouched by changes made to the copy."""
        return copy.deepcopy(self)
