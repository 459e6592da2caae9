"""Column level schema model objects."""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from dbmatic.models.base import require_text
from dbmatic.models.enums import DmColumnOrder, DmForeignKeyAction, ProviderType
from dbmatic.models.errors import ModelValidationError


@dataclass
class DmOrderedColumn:
    """A column reference with a sort order, used for index and constraint keys."""

    column_name: str
    order: DmColumnOrder = DmColumnOrder.ASCENDING

    def __post_init__(self):
        require_text(self.column_name, "column_name", "DmOrderedColumn")

    @classmethod
    def parse(cls, text: str) -> "DmOrderedColumn":
        """Parse text such as ``"created_at desc"`` into an ordered column.

        :param text: a column name optionally followed by ASC or DESC
        :returns: the ordered column
        :raises: ModelValidationError
        """
        require_text(text, "column definition", "DmOrderedColumn")
        parts = text.strip().rsplit(None, 1)
        if len(parts) == 2 and parts[1].upper() in ("ASC", "DESC"):
            order = DmColumnOrder.DESCENDING if parts[1].upper() == "DESC" else DmColumnOrder.ASCENDING
            return cls(parts[0], order)
        return cls(text.strip())

    @classmethod
    def coerce(cls, value) -> "DmOrderedColumn":
        """Return the value as an ordered column, parsing it when given as text."""
        return value if isinstance(value, DmOrderedColumn) else cls.parse(value)

    def __str__(self) -> str:
        if self.order is DmColumnOrder.DESCENDING:
            return f"{self.column_name} DESC"
        return self.column_name


@dataclass
class DmColumn:
    """A table column with its type, nullability, key flags and column scoped constraint shortcuts.

    The ``is_unique``, ``is_indexed``, ``is_foreign_key``, ``check_expression`` and ``default_expression``
    fields are shortcuts for single column constraints and indexes, they are expanded into named
    constraints when the column's table is created.
    """

    schema_name: Optional[str]
    table_name: str
    column_name: str
    host_type: Any = str
    provider_data_types: Dict[ProviderType, str] = field(default_factory=dict)
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    check_expression: Optional[str] = None
    default_expression: Optional[str] = None
    is_nullable: bool = False
    is_primary_key: bool = False
    is_auto_increment: bool = False
    is_unique: bool = False
    is_unicode: Optional[bool] = None
    is_fixed_length: Optional[bool] = None
    is_indexed: bool = False
    is_foreign_key: bool = False
    referenced_table_name: Optional[str] = None
    referenced_column_name: Optional[str] = None
    on_delete: Optional[DmForeignKeyAction] = None
    on_update: Optional[DmForeignKeyAction] = None

    def __post_init__(self):
        require_text(self.table_name, "table_name", "DmColumn")
        require_text(self.column_name, "column_name", "DmColumn")
        if self.host_type is None:
            raise ModelValidationError(f"DmColumn '{self.column_name}' requires a host_type")
        if self.is_foreign_key:
            require_text(self.referenced_table_name, "referenced_table_name", "Foreign key DmColumn")
            require_text(self.referenced_column_name, "referenced_column_name", "Foreign key DmColumn")
        self.provider_data_types = {ProviderType(k): v for k, v in self.provider_data_types.items()}

    def get_provider_data_type(self, provider: ProviderType) -> Optional[str]:
        """Return the raw SQL type override for a provider, if one was given."""
        return self.provider_data_types.get(provider)

    def copy(self) -> "DmColumn":
        """Return a deep copy of the column."""
        return copy.deepcopy(self)
