"""Batched table alterations and the fixed order their steps are applied in."""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from dbmatic.models import (
    DmCheckConstraint,
    DmColumn,
    DmDefaultConstraint,
    DmForeignKeyConstraint,
    DmIndex,
    DmPrimaryKeyConstraint,
    DmUniqueConstraint,
)
from dbmatic.models.base import require_text


class AlterationStepKind(enum.Enum):
    """The kinds of step an alteration is broken into, declared in the order they are applied."""

    DROP_FOREIGN_KEY = "drop_foreign_key"
    DROP_INDEX = "drop_index"
    DROP_UNIQUE = "drop_unique"
    DROP_CHECK = "drop_check"
    DROP_DEFAULT = "drop_default"
    DROP_PRIMARY_KEY = "drop_primary_key"
    DROP_COLUMN = "drop_column"
    RENAME_TABLE = "rename_table"
    RENAME_COLUMN = "rename_column"
    ADD_COLUMN = "add_column"
    ADD_PRIMARY_KEY = "add_primary_key"
    ADD_UNIQUE = "add_unique"
    ADD_CHECK = "add_check"
    ADD_DEFAULT = "add_default"
    ADD_INDEX = "add_index"
    ADD_FOREIGN_KEY = "add_foreign_key"


@dataclass(frozen=True)
class AlterationStep:
    """One unit of work of an alteration.

    The payload is a name for drops, a ``(old_name, new_name)`` tuple for renames, a model object for
    adds and None for dropping the primary key.
    """

    kind: AlterationStepKind
    payload: Any = None


@dataclass
class TableAlteration:
    """A batch of changes to one table.

    Drops address objects by name, adds carry full definitions. Steps are applied in a fixed order
    regardless of the order the lists are given in: foreign keys are dropped first and added last, and
    columns are dropped before the table and its columns are renamed and new columns added.
    """

    schema_name: Optional[str]
    table_name: str
    new_table_name: Optional[str] = None
    rename_columns: Dict[str, str] = field(default_factory=dict)
    drop_primary_key: bool = False
    drop_columns: List[str] = field(default_factory=list)
    drop_check_constraints: List[str] = field(default_factory=list)
    drop_default_constraints: List[str] = field(default_factory=list)
    drop_unique_constraints: List[str] = field(default_factory=list)
    drop_foreign_key_constraints: List[str] = field(default_factory=list)
    drop_indexes: List[str] = field(default_factory=list)
    add_columns: List[DmColumn] = field(default_factory=list)
    add_primary_key: Optional[DmPrimaryKeyConstraint] = None
    add_check_constraints: List[DmCheckConstraint] = field(default_factory=list)
    add_default_constraints: List[DmDefaultConstraint] = field(default_factory=list)
    add_unique_constraints: List[DmUniqueConstraint] = field(default_factory=list)
    add_foreign_key_constraints: List[DmForeignKeyConstraint] = field(default_factory=list)
    add_indexes: List[DmIndex] = field(default_factory=list)

    def __post_init__(self):
        require_text(self.table_name, "table_name", "TableAlteration")
        if self.new_table_name is not None:
            require_text(self.new_table_name, "new_table_name", "TableAlteration")

    @property
    def target_table_name(self) -> str:
        """Return the table's name once the alteration has been applied."""
        return self.new_table_name or self.table_name

    def is_empty(self) -> bool:
        """Test whether the alteration changes nothing."""
        return next(self.steps(), None) is None

    def steps(self) -> Iterator[AlterationStep]:
        """Yield the steps of the alteration in the order they must be applied.

        :returns: an iterator of alteration steps
        """
        k = AlterationStepKind
        for name in self.drop_foreign_key_constraints:
            yield AlterationStep(k.DROP_FOREIGN_KEY, name)
        for name in self.drop_indexes:
            yield AlterationStep(k.DROP_INDEX, name)
        for name in self.drop_unique_constraints:
            yield AlterationStep(k.DROP_UNIQUE, name)
        for name in self.drop_check_constraints:
            yield AlterationStep(k.DROP_CHECK, name)
        for name in self.drop_default_constraints:
            yield AlterationStep(k.DROP_DEFAULT, name)
        if self.drop_primary_key:
            yield AlterationStep(k.DROP_PRIMARY_KEY)
        for name in self.drop_columns:
            yield AlterationStep(k.DROP_COLUMN, name)
        if self.new_table_name and self.new_table_name != self.table_name:
            yield AlterationStep(k.RENAME_TABLE, (self.table_name, self.new_table_name))
        for old_name, new_name in self.rename_columns.items():
            yield AlterationStep(k.RENAME_COLUMN, (old_name, new_name))
        for column in self.add_columns:
            yield AlterationStep(k.ADD_COLUMN, column)
        if self.add_primary_key is not None:
            yield AlterationStep(k.ADD_PRIMARY_KEY, self.add_primary_key)
        for constraint in self.add_unique_constraints:
            yield AlterationStep(k.ADD_UNIQUE, constraint)
        for constraint in self.add_check_constraints:
            yield AlterationStep(k.ADD_CHECK, constraint)
        for constraint in self.add_default_constraints:
            yield AlterationStep(k.ADD_DEFAULT, constraint)
        for index in self.add_indexes:
            yield AlterationStep(k.ADD_INDEX, index)
        for constraint in self.add_foreign_key_constraints:
            yield AlterationStep(k.ADD_FOREIGN_KEY, constraint)
