"""Defines the per provider dialect: identifier handling, capabilities and DDL statement builders.

Builders return the SQL text of a single statement. A builder returning None signals that the provider
cannot make the change in place and the table has to be rebuilt.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional

from dbmatic.models import (
    DmCheckConstraint,
    DmColumn,
    DmDefaultConstraint,
    DmForeignKeyConstraint,
    DmIndex,
    DmOrderedColumn,
    DmPrimaryKeyConstraint,
    DmTable,
    DmUniqueConstraint,
    DmView,
    ProviderType,
)
from dbmatic.models.enums import DmColumnOrder
from dbmatic.naming import to_alpha_numeric, to_like_pattern
from dbmatic.providers.errors import ViewDefinitionError
from dbmatic.providers.version import DatabaseVersion

_STANDALONE_AS = re.compile(r"\sAS\s", re.IGNORECASE)
_SIMPLE_TOKEN = re.compile(r"^(?:'[^']*'|-?[\w.]+|\w+\(\))$")


def strip_view_header(definition: str) -> str:
    """Return the SELECT statement of a stored ``CREATE VIEW ... AS ...`` statement.

    :param definition: the stored view definition
    :returns: the text after the first standalone AS
    :raises: ViewDefinitionError
    """
    definition = (definition or "").strip()
    match = _STANDALONE_AS.search(definition)
    if not match:
        raise ViewDefinitionError(f"Could not parse view definition: {definition}")
    return definition[match.end() :].strip()  # noqa: E203


def unwrap_parentheses(expression: Optional[str]) -> Optional[str]:
    """Remove parentheses that enclose the whole expression, e.g. ``((0))`` becomes ``0``."""
    if expression is None:
        return None
    expression = expression.strip()
    while expression.startswith("(") and expression.endswith(")"):
        depth = 0
        for i, char in enumerate(expression):
            depth += 1 if char == "(" else -1 if char == ")" else 0
            if depth == 0 and i < len(expression) - 1:
                return expression
        expression = expression[1:-1].strip()
    return expression


class Dialect:
    """Base dialect, rendering the DDL that most providers share.

    Providers subclass this and override the statements and capabilities that differ.
    """

    provider_type: ProviderType = None
    default_schema: Optional[str] = None
    supports_schemas: bool = True
    lower_case_names: bool = False
    quote_open: str = '"'
    quote_close: str = '"'
    version_sql: str = "SELECT version()"
    version_dependent_capabilities: bool = False

    def __init__(self):
        """Construct a dialect."""
        self.logger = logging.getLogger(__name__)

    # Identifiers

    def normalize_name(self, name: Optional[str]) -> Optional[str]:
        """Canonicalize an identifier before it is used in a statement or compared.

        :param name: the identifier
        :returns: the identifier without characters other than letters, digits and underscores
        """
        if not name:
            return name
        name = to_alpha_numeric(name, "_")
        return name.lower() if self.lower_case_names else name

    def normalize_schema_name(self, schema_name: Optional[str]) -> Optional[str]:
        """Canonicalize a schema name, falling back to the default schema when none is given."""
        if not self.supports_schemas:
            return None
        if not schema_name or not schema_name.strip():
            return self.default_schema
        return self.normalize_name(schema_name)

    def normalize_filter(self, name_filter: Optional[str]) -> Optional[str]:
        """Canonicalize a wildcard filter, keeping its ``*`` and ``?`` wildcards."""
        if not name_filter:
            return None
        name_filter = to_alpha_numeric(name_filter, "_*?")
        return name_filter.lower() if self.lower_case_names else name_filter

    def like_pattern(self, name_filter: Optional[str]) -> str:
        """Return the lower-cased LIKE pattern used to pre-filter catalog queries."""
        return to_like_pattern(self.normalize_filter(name_filter)).lower()

    def quote(self, name: str) -> str:
        """Quote an identifier."""
        return f"{self.quote_open}{name}{self.quote_close}"

    def qualify(self, schema_name: Optional[str], name: str) -> str:
        """Quote an object name, prefixed with its quoted schema where the provider has schemas."""
        if self.supports_schemas and schema_name:
            return f"{self.quote(schema_name)}.{self.quote(name)}"
        return self.quote(name)

    def key_columns(self, columns: Iterable[DmOrderedColumn], ordered: bool = True) -> str:
        """Render a comma separated key column list, with DESC markers when ``ordered``."""
        rendered = []
        for column in columns:
            text = self.quote(column.column_name)
            if ordered and column.order is DmColumnOrder.DESCENDING:
                text += " DESC"
            rendered.append(text)
        return ", ".join(rendered)

    # Capabilities

    def supports_check_constraints(self, version: Optional[DatabaseVersion], version_text: str = "") -> bool:
        """Test whether check constraints are enforced by the given server version."""
        return True

    def supports_ordered_keys(self, version: Optional[DatabaseVersion], version_text: str = "") -> bool:
        """Test whether key order (ASC / DESC) is honored inside constraint definitions."""
        return True

    def is_auto_increment(self, value) -> bool:
        """Interpret the catalog's auto increment marker for a column.

        :param value: a boolean, an integer flag or a marker string, depending on the provider
        :returns: whether the column auto increments
        """
        if value is None:
            return False
        if isinstance(value, (bool, int)):
            return bool(value)
        return str(value).strip().lower() not in ("", "0", "false", "no")

    def normalize_view_definition(self, definition: str) -> str:
        """Return the SELECT statement of a view as stored in the catalog."""
        return (definition or "").strip().rstrip(";").strip()

    # Column definitions

    def auto_increment_clause(self, column: DmColumn, sql_type: str) -> str:
        """Return the clause marking a column as auto incrementing, empty when it does not."""
        return ""

    def default_clause(self, default: DmDefaultConstraint) -> str:
        """Return the DEFAULT clause of a column definition."""
        return f"DEFAULT {default.expression}"

    def inline_primary_key(self, table: DmTable) -> Optional[str]:
        """Return the name of the column carrying the primary key inline, None for a table level key."""
        return None

    def column_definition(
        self,
        column: DmColumn,
        sql_type: str,
        default: Optional[DmDefaultConstraint] = None,
        primary_key: Optional[DmPrimaryKeyConstraint] = None,
    ) -> str:
        """Render one column of a CREATE TABLE or ADD COLUMN statement.

        :param column: the column
        :param sql_type: the column's SQL type
        :param default: the column's default, if any
        :param primary_key: the primary key when it is declared inline on this column
        :returns: the column definition
        """
        parts = [self.quote(column.column_name), sql_type]
        parts.append("NULL" if column.is_nullable and not column.is_primary_key else "NOT NULL")
        identity = self.auto_increment_clause(column, sql_type)
        if identity:
            parts.append(identity)
        if primary_key is not None:
            parts.append(f"CONSTRAINT {self.quote(primary_key.constraint_name)} PRIMARY KEY")
        if default is not None and not identity:
            parts.append(self.default_clause(default))
        return " ".join(parts)

    # Constraint clauses

    def primary_key_clause(self, constraint: DmPrimaryKeyConstraint, ordered: bool) -> str:  # noqa: D102
        return (
            f"CONSTRAINT {self.quote(constraint.constraint_name)} "
            f"PRIMARY KEY ({self.key_columns(constraint.columns, ordered)})"
        )

    def unique_clause(self, constraint: DmUniqueConstraint, ordered: bool) -> str:  # noqa: D102
        return f"CONSTRAINT {self.quote(constraint.constraint_name)} UNIQUE ({self.key_columns(constraint.columns, ordered)})"

    def check_clause(self, constraint: DmCheckConstraint) -> str:  # noqa: D102
        return f"CONSTRAINT {self.quote(constraint.constraint_name)} CHECK ({constraint.expression})"

    def foreign_key_clause(self, constraint: DmForeignKeyConstraint) -> str:  # noqa: D102
        referenced = self.qualify(constraint.schema_name, constraint.referenced_table_name)
        return (
            f"CONSTRAINT {self.quote(constraint.constraint_name)} "
            f"FOREIGN KEY ({self.key_columns(constraint.source_columns, False)}) "
            f"REFERENCES {referenced} ({self.key_columns(constraint.referenced_columns, False)}) "
            f"ON DELETE {constraint.on_delete.to_sql()} ON UPDATE {constraint.on_update.to_sql()}"
        )

    # Schemas

    def create_schema(self, schema_name: str) -> str:  # noqa: D102
        return f"CREATE SCHEMA {self.quote(schema_name)}"

    def drop_schema(self, schema_name: str) -> str:  # noqa: D102
        return f"DROP SCHEMA {self.quote(schema_name)}"

    # Tables

    def create_table(
        self,
        table: DmTable,
        column_types: Dict[str, str],
        supports_checks: bool = True,
        ordered_keys: bool = True,
    ) -> List[str]:
        """Render the statements creating a table and its indexes.

        :param table: a table with normalized names whose column flags are expanded into constraints
        :param column_types: the SQL type of every column, keyed by lower-cased column name
        :param supports_checks: render check constraints, defaults to True
        :param ordered_keys: render DESC markers in constraint keys, defaults to True
        :returns: the CREATE TABLE statement followed by CREATE INDEX statements
        """
        inline_pk_column = self.inline_primary_key(table)
        defaults = {d.column_name.lower(): d for d in table.default_constraints}
        definitions = []
        for column in table.columns:
            is_inline_pk = inline_pk_column is not None and column.column_name.lower() == inline_pk_column.lower()
            definitions.append(
                self.column_definition(
                    column,
                    column_types[column.column_name.lower()],
                    defaults.get(column.column_name.lower()),
                    table.primary_key_constraint if is_inline_pk else None,
                )
            )
        if table.primary_key_constraint is not None and inline_pk_column is None:
            definitions.append(self.primary_key_clause(table.primary_key_constraint, ordered_keys))
        for constraint in table.unique_constraints:
            definitions.append(self.unique_clause(constraint, ordered_keys))
        if supports_checks:
            for constraint in table.check_constraints:
                definitions.append(self.check_clause(constraint))
        for constraint in table.foreign_key_constraints:
            definitions.append(self.foreign_key_clause(constraint))
        body = ",\n    ".join(definitions)
        statements = [f"CREATE TABLE {self.qualify(table.schema_name, table.table_name)} (\n    {body}\n)"]
        statements += [self.create_index(index) for index in table.indexes]
        return statements

    def drop_table(self, schema_name: Optional[str], table_name: str) -> str:  # noqa: D102
        return f"DROP TABLE {self.qualify(schema_name, table_name)}"

    def rename_table(self, schema_name: Optional[str], table_name: str, new_table_name: str) -> str:  # noqa: D102
        return f"ALTER TABLE {self.qualify(schema_name, table_name)} RENAME TO {self.quote(new_table_name)}"

    def truncate_table(self, schema_name: Optional[str], table_name: str) -> Optional[str]:  # noqa: D102
        return f"TRUNCATE TABLE {self.qualify(schema_name, table_name)}"

    # Columns

    def add_column(self, table: DmTable, column: DmColumn, sql_type: str, default=None) -> Optional[str]:  # noqa: D102
        definition = self.column_definition(column, sql_type, default)
        return f"ALTER TABLE {self.qualify(table.schema_name, table.table_name)} ADD {definition}"

    def column_dependents(self, table: DmTable, column_name: str) -> List[str]:
        """Return the statements dropping what must go before a column can be dropped, none by default."""
        return []

    def drop_column(self, table: DmTable, column_name: str) -> Optional[str]:  # noqa: D102
        return f"ALTER TABLE {self.qualify(table.schema_name, table.table_name)} DROP COLUMN {self.quote(column_name)}"

    def rename_column(self, table: DmTable, column_name: str, new_column_name: str) -> Optional[str]:  # noqa: D102
        return (
            f"ALTER TABLE {self.qualify(table.schema_name, table.table_name)} "
            f"RENAME COLUMN {self.quote(column_name)} TO {self.quote(new_column_name)}"
        )

    # Constraints

    def _alter_table(self, schema_name: Optional[str], table_name: str, clause: str) -> str:
        return f"ALTER TABLE {self.qualify(schema_name, table_name)} {clause}"

    def _drop_constraint(self, schema_name: Optional[str], table_name: str, name: str) -> str:
        return self._alter_table(schema_name, table_name, f"DROP CONSTRAINT {self.quote(name)}")

    def add_primary_key(self, constraint: DmPrimaryKeyConstraint, ordered: bool = True) -> Optional[str]:  # noqa: D102
        clause = self.primary_key_clause(constraint, ordered)
        return self._alter_table(constraint.schema_name, constraint.table_name, f"ADD {clause}")

    def drop_primary_key(self, schema_name: Optional[str], table_name: str, name: str) -> Optional[str]:  # noqa: D102
        return self._drop_constraint(schema_name, table_name, name)

    def add_unique_constraint(self, constraint: DmUniqueConstraint, ordered: bool = True) -> Optional[str]:  # noqa: D102
        clause = self.unique_clause(constraint, ordered)
        return self._alter_table(constraint.schema_name, constraint.table_name, f"ADD {clause}")

    def drop_unique_constraint(self, schema_name: Optional[str], table_name: str, name: str) -> Optional[str]:  # noqa: D102
        return self._drop_constraint(schema_name, table_name, name)

    def add_check_constraint(self, constraint: DmCheckConstraint) -> Optional[str]:  # noqa: D102
        clause = self.check_clause(constraint)
        return self._alter_table(constraint.schema_name, constraint.table_name, f"ADD {clause}")

    def drop_check_constraint(self, schema_name: Optional[str], table_name: str, name: str) -> Optional[str]:  # noqa: D102
        return self._drop_constraint(schema_name, table_name, name)

    def add_default_constraint(self, constraint: DmDefaultConstraint) -> Optional[str]:  # noqa: D102
        return self._alter_table(
            constraint.schema_name,
            constraint.table_name,
            f"ALTER COLUMN {self.quote(constraint.column_name)} SET {self.default_clause(constraint)}",
        )

    def drop_default_constraint(self, constraint: DmDefaultConstraint) -> Optional[str]:  # noqa: D102
        return self._alter_table(
            constraint.schema_name,
            constraint.table_name,
            f"ALTER COLUMN {self.quote(constraint.column_name)} DROP DEFAULT",
        )

    def add_foreign_key(self, constraint: DmForeignKeyConstraint) -> Optional[str]:  # noqa: D102
        clause = self.foreign_key_clause(constraint)
        return self._alter_table(constraint.schema_name, constraint.table_name, f"ADD {clause}")

    def drop_foreign_key(self, schema_name: Optional[str], table_name: str, name: str) -> Optional[str]:  # noqa: D102
        return self._drop_constraint(schema_name, table_name, name)

    # Indexes

    def create_index(self, index: DmIndex) -> str:  # noqa: D102
        unique = "UNIQUE " if index.is_unique else ""
        return (
            f"CREATE {unique}INDEX {self.quote(index.index_name)} "
            f"ON {self.qualify(index.schema_name, index.table_name)} ({self.key_columns(index.columns)})"
        )

    def drop_index(self, schema_name: Optional[str], table_name: str, index_name: str) -> str:  # noqa: D102
        return f"DROP INDEX {self.quote(index_name)} ON {self.qualify(schema_name, table_name)}"

    # Views

    def create_view(self, view: DmView) -> str:  # noqa: D102
        return f"CREATE VIEW {self.qualify(view.schema_name, view.view_name)} AS {view.definition}"

    def drop_view(self, schema_name: Optional[str], view_name: str) -> str:  # noqa: D102
        return f"DROP VIEW {self.qualify(schema_name, view_name)}"


def is_simple_expression(expression: str) -> bool:
    """Test whether a default expression is a single literal, identifier or niladic call like ``now()``."""
    return bool(_SIMPLE_TOKEN.match(expression.strip()))
