"""PostgreSQL statements and capabilities."""

from typing import Optional

from dbmatic.models import DmColumn, DmTable, ProviderType
from dbmatic.providers.dialect import Dialect
from dbmatic.providers.version import DatabaseVersion


class PostgresDialect(Dialect):
    """Dialect for PostgreSQL. Unquoted identifiers fold to lower case, so names are kept lower case."""

    provider_type = ProviderType.POSTGRESQL
    default_schema = "public"
    lower_case_names = True
    version_sql = "SELECT version()"

    def supports_ordered_keys(self, version: Optional[DatabaseVersion], version_text: str = "") -> bool:  # noqa: D102
        return False

    def is_auto_increment(self, value) -> bool:  # noqa: D102
        if isinstance(value, str):
            return bool(value.strip())
        return super().is_auto_increment(value)

    def auto_increment_clause(self, column: DmColumn, sql_type: str) -> str:  # noqa: D102
        if not column.is_auto_increment or "serial" in sql_type.lower():
            return ""
        return "GENERATED BY DEFAULT AS IDENTITY"

    def drop_schema(self, schema_name: str) -> str:  # noqa: D102
        return f"DROP SCHEMA {self.quote(schema_name)} CASCADE"

    def drop_table(self, schema_name: Optional[str], table_name: str) -> str:  # noqa: D102
        return f"DROP TABLE {self.qualify(schema_name, table_name)} CASCADE"

    def add_column(self, table: DmTable, column: DmColumn, sql_type: str, default=None) -> str:  # noqa: D102
        definition = self.column_definition(column, sql_type, default)
        return f"ALTER TABLE {self.qualify(table.schema_name, table.table_name)} ADD COLUMN {definition}"

    def drop_index(self, schema_name: Optional[str], table_name: str, index_name: str) -> str:  # noqa: D102
        return f"DROP INDEX {self.qualify(schema_name, index_name)} CASCADE"
