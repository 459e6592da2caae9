"""SQL Server statements and capabilities."""

from typing import List, Optional

from dbmatic.models import DmColumn, DmDefaultConstraint, DmTable, ProviderType
from dbmatic.providers.dialect import Dialect, strip_view_header


class SqlServerDialect(Dialect):
    """Dialect for SQL Server.

    Defaults are named constraints, declared inline with ``CONSTRAINT [df_..] DEFAULT (...)``, and renames
    go through ``sp_rename``.
    """

    provider_type = ProviderType.SQLSERVER
    default_schema = "dbo"
    quote_open = "["
    quote_close = "]"
    version_sql = "SELECT CAST(SERVERPROPERTY('ProductVersion') AS nvarchar(128))"

    def auto_increment_clause(self, column: DmColumn, sql_type: str) -> str:  # noqa: D102
        return "IDENTITY(1,1)" if column.is_auto_increment else ""

    def default_clause(self, default: DmDefaultConstraint) -> str:  # noqa: D102
        return f"CONSTRAINT {self.quote(default.constraint_name)} DEFAULT ({default.expression})"

    def normalize_view_definition(self, definition: str) -> str:  # noqa: D102
        return strip_view_header(definition)

    def rename_table(self, schema_name: Optional[str], table_name: str, new_table_name: str) -> str:  # noqa: D102
        source = f"{schema_name}.{table_name}" if schema_name else table_name
        return f"EXEC sp_rename '{source}', '{new_table_name}'"

    def rename_column(self, table: DmTable, column_name: str, new_column_name: str) -> str:  # noqa: D102
        source = ".".join(n for n in (table.schema_name, table.table_name, column_name) if n)
        return f"EXEC sp_rename '{source}', '{new_column_name}', 'COLUMN'"

    def column_dependents(self, table: DmTable, column_name: str) -> List[str]:
        """Return the statements dropping the defaults, constraints and indexes defined on a column.

        SQL Server refuses to drop a column while any of them remain.
        """
        wanted = column_name.lower()
        s, t = table.schema_name, table.table_name
        statements = []
        for constraint in table.default_constraints:
            if constraint.column_name.lower() == wanted:
                statements.append(self._drop_constraint(s, t, constraint.constraint_name))
        for constraint in table.check_constraints:
            if (constraint.column_name or "").lower() == wanted:
                statements.append(self._drop_constraint(s, t, constraint.constraint_name))
        for constraint in table.unique_constraints:
            if wanted in (c.lower() for c in constraint.column_names):
                statements.append(self._drop_constraint(s, t, constraint.constraint_name))
        for constraint in table.foreign_key_constraints:
            if wanted in (c.lower() for c in constraint.source_column_names):
                statements.append(self._drop_constraint(s, t, constraint.constraint_name))
        for index in table.indexes:
            if wanted in (c.lower() for c in index.column_names):
                statements.append(self.drop_index(s, t, index.index_name))
        return statements

    def add_default_constraint(self, constraint: DmDefaultConstraint) -> str:  # noqa: D102
        return self._alter_table(
            constraint.schema_name,
            constraint.table_name,
            f"ADD {self.default_clause(constraint)} FOR {self.quote(constraint.column_name)}",
        )

    def drop_default_constraint(self, constraint: DmDefaultConstraint) -> str:  # noqa: D102
        return self._drop_constraint(constraint.schema_name, constraint.table_name, constraint.constraint_name)
