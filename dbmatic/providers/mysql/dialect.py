"""MySQL and MariaDB statements and capabilities."""

from typing import Optional

from dbmatic.models import DmColumn, DmDefaultConstraint, ProviderType
from dbmatic.providers.dialect import Dialect, is_simple_expression
from dbmatic.providers.version import DatabaseVersion

CHECKS_SINCE_MYSQL = DatabaseVersion(8, 0, 16)
CHECKS_SINCE_MARIADB = DatabaseVersion(10, 2, 1)


def is_mariadb(version_text: str) -> bool:
    """Test whether a server version text comes from MariaDB."""
    return "mariadb" in (version_text or "").lower()


class MySqlDialect(Dialect):
    """Dialect for MySQL and MariaDB.

    There are no schemas, every object lives in the connection's current database. Check constraints
    and key order depend on the server, so the version is looked up before statements that use them.
    """

    provider_type = ProviderType.MYSQL
    default_schema = None
    supports_schemas = False
    quote_open = "`"
    quote_close = "`"
    version_sql = "SELECT VERSION()"
    version_dependent_capabilities = True

    def supports_check_constraints(self, version: Optional[DatabaseVersion], version_text: str = "") -> bool:
        """Test whether the server enforces check constraints.

        MySQL parses and ignores them before 8.0.16, MariaDB enforces them from 10.2.1.
        """
        if version is None:
            return True
        return version >= (CHECKS_SINCE_MARIADB if is_mariadb(version_text) else CHECKS_SINCE_MYSQL)

    def supports_ordered_keys(self, version: Optional[DatabaseVersion], version_text: str = "") -> bool:
        """Test whether the server honors DESC inside keys, MySQL 8 does and MariaDB does not."""
        if version is None:
            return False
        return not is_mariadb(version_text) and version.major >= 8

    def is_auto_increment(self, value) -> bool:
        """Interpret the EXTRA column of ``information_schema.COLUMNS``."""
        if isinstance(value, (bool, int)):
            return bool(value)
        return "auto_increment" in str(value or "").lower()

    def auto_increment_clause(self, column: DmColumn, sql_type: str) -> str:  # noqa: D102
        return "AUTO_INCREMENT" if column.is_auto_increment else ""

    def default_clause(self, default: DmDefaultConstraint) -> str:
        """Render a DEFAULT clause, wrapping expressions other than plain literals in parentheses."""
        expression = default.expression.strip()
        if is_simple_expression(expression) or (expression.startswith("(") and expression.endswith(")")):
            return f"DEFAULT {expression}"
        return f"DEFAULT ({expression})"

    def drop_primary_key(self, schema_name: Optional[str], table_name: str, name: str) -> str:  # noqa: D102
        return self._alter_table(schema_name, table_name, "DROP PRIMARY KEY")

    def drop_unique_constraint(self, schema_name: Optional[str], table_name: str, name: str) -> str:  # noqa: D102
        return self._alter_table(schema_name, table_name, f"DROP INDEX {self.quote(name)}")

    def drop_foreign_key(self, schema_name: Optional[str], table_name: str, name: str) -> str:  # noqa: D102
        return self._alter_table(schema_name, table_name, f"DROP FOREIGN KEY {self.quote(name)}")
