"""Enumerations shared by the schema model."""

import enum


class ProviderType(enum.Enum):
    """The SQL dialects dbmatic can generate DDL for and introspect."""

    POSTGRESQL = "postgresql"
    SQLSERVER = "sqlserver"
    MYSQL = "mysql"
    SQLITE = "sqlite"


class DmColumnOrder(enum.Enum):
    """Sort order of a column within an index or constraint key."""

    ASCENDING = "ASC"
    DESCENDING = "DESC"


class DmConstraintType(enum.Enum):
    """Discriminates the concrete constraint kinds."""

    PRIMARY_KEY = "primary_key"
    FOREIGN_KEY = "foreign_key"
    UNIQUE = "unique"
    CHECK = "check"
    DEFAULT = "default"


class DmForeignKeyAction(enum.Enum):
    """Referential action taken on delete or update of a referenced row."""

    NO_ACTION = "NO ACTION"
    RESTRICT = "RESTRICT"
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"

    def to_sql(self) -> str:
        """Render the action as it appears after ``ON DELETE`` / ``ON UPDATE``."""
        return self.value

    @classmethod
    def parse(cls, text: str) -> "DmForeignKeyAction":
        """Parse an action from catalog or user text.

        Accepts SQL spellings ("SET NULL"), enum style names ("set_null") and the single letter codes
        PostgreSQL stores in ``pg_constraint``. Unknown or empty text is treated as NO ACTION.

        :param text: the text to parse
        :returns: the matching action
        """
        if not text:
            return cls.NO_ACTION
        text = text.strip()
        if len(text) == 1:
            return _PG_ACTION_CODES.get(text.lower(), cls.NO_ACTION)
        normalized = text.replace("_", " ").upper()
        for action in cls:
            if action.value == normalized:
                return action
        return cls.NO_ACTION


_PG_ACTION_CODES = {
    "a": DmForeignKeyAction.NO_ACTION,
    "r": DmForeignKeyAction.RESTRICT,
    "c": DmForeignKeyAction.CASCADE,
    "n": DmForeignKeyAction.SET_NULL,
    "d": DmForeignKeyAction.SET_DEFAULT,
}
