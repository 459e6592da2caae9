"""SQLite statements and capabilities.

SQLite's ALTER TABLE can only rename tables and columns, drop indexes and add them. Every other change
returns None from its builder, and the table is rebuilt instead.
"""

from typing import List, Optional

from dbmatic.models import (
    DmCheckConstraint,
    DmColumn,
    DmDefaultConstraint,
    DmForeignKeyConstraint,
    DmPrimaryKeyConstraint,
    DmTable,
    DmUniqueConstraint,
    ProviderType,
)
from dbmatic.providers.dialect import Dialect, strip_view_header


class SqliteDialect(Dialect):
    """Dialect for SQLite."""

    provider_type = ProviderType.SQLITE
    default_schema = None
    supports_schemas = False
    version_sql = "SELECT sqlite_version()"

    def normalize_view_definition(self, definition: str) -> str:  # noqa: D102
        return super().normalize_view_definition(strip_view_header(definition))

    def default_clause(self, default: DmDefaultConstraint) -> str:  # noqa: D102
        return f"CONSTRAINT {self.quote(default.constraint_name)} DEFAULT ({default.expression})"

    def inline_primary_key(self, table: DmTable) -> Optional[str]:
        """Return the column of a single column auto increment primary key.

        AUTOINCREMENT is only valid on a column declared ``INTEGER PRIMARY KEY``, so that key is written on
        the column instead of as a table constraint.
        """
        pk = table.primary_key_constraint
        if pk is None or len(pk.columns) != 1:
            return None
        column = table.get_column(pk.column_names[0])
        return column.column_name if column is not None and column.is_auto_increment else None

    def column_definition(
        self,
        column: DmColumn,
        sql_type: str,
        default: Optional[DmDefaultConstraint] = None,
        primary_key: Optional[DmPrimaryKeyConstraint] = None,
    ) -> str:
        """Render a column, with AUTOINCREMENT following an inline primary key."""
        parts = [self.quote(column.column_name), sql_type]
        parts.append("NULL" if column.is_nullable and not column.is_primary_key else "NOT NULL")
        if primary_key is not None:
            parts.append(f"CONSTRAINT {self.quote(primary_key.constraint_name)} PRIMARY KEY")
            if column.is_auto_increment:
                parts.append("AUTOINCREMENT")
        if default is not None:
            parts.append(self.default_clause(default))
        return " ".join(parts)

    def truncate_table(self, schema_name: Optional[str], table_name: str) -> Optional[str]:  # noqa: D102
        return None

    def add_column(self, table: DmTable, column: DmColumn, sql_type: str, default=None) -> Optional[str]:  # noqa: D102
        return None

    def drop_column(self, table: DmTable, column_name: str) -> Optional[str]:  # noqa: D102
        return None

    def column_dependents(self, table: DmTable, column_name: str) -> List[str]:  # noqa: D102
        return []

    def add_primary_key(self, constraint: DmPrimaryKeyConstraint, ordered: bool = True) -> Optional[str]:  # noqa: D102
        return None

    def drop_primary_key(self, schema_name: Optional[str], table_name: str, name: str) -> Optional[str]:  # noqa: D102
        return None

    def add_unique_constraint(self, constraint: DmUniqueConstraint, ordered: bool = True) -> Optional[str]:  # noqa: D102
        return None

    def drop_unique_constraint(self, schema_name: Optional[str], table_name: str, name: str) -> Optional[str]:  # noqa: D102
        return None

    def add_check_constraint(self, constraint: DmCheckConstraint) -> Optional[str]:  # noqa: D102
        return None

    def drop_check_constraint(self, schema_name: Optional[str], table_name: str, name: str) -> Optional[str]:  # noqa: D102
        return None

    def add_default_constraint(self, constraint: DmDefaultConstraint) -> Optional[str]:  # noqa: D102
        return None

    def drop_default_constraint(self, constraint: DmDefaultConstraint) -> Optional[str]:  # noqa: D102
        return None

    def add_foreign_key(self, constraint: DmForeignKeyConstraint) -> Optional[str]:  # noqa: D102
        return None

    def drop_foreign_key(self, schema_name: Optional[str], table_name: str, name: str) -> Optional[str]:  # noqa: D102
        return None

    def drop_index(self, schema_name: Optional[str], table_name: str, index_name: str) -> str:  # noqa: D102
        return f"DROP INDEX {self.quote(index_name)}"
