"""Parses the CREATE TABLE statements SQLite stores in ``sqlite_master`` back into tables.

SQLite keeps no catalog of constraints, the statement a table was created with is the only record of
its keys, checks, defaults and foreign keys.
"""

from collections import namedtuple
from typing import Callable, List, Optional

# fmt: off
from pyparsing import (  # noqa: I101
    alphanums, c_style_comment, original_text_for, printables,
    CaselessKeyword, Group, Literal, Optional as Opt, ParseBaseException, QuotedString, Regex, Suppress, Word,
    ZeroOrMore, nested_expr
)
# fmt: on

from dbmatic.models import (
    DmCheckConstraint,
    DmColumn,
    DmDefaultConstraint,
    DmForeignKeyAction,
    DmForeignKeyConstraint,
    DmOrderedColumn,
    DmPrimaryKeyConstraint,
    DmTable,
    DmUniqueConstraint,
)
from dbmatic.models.enums import DmColumnOrder
from dbmatic.naming import (
    generate_check_constraint_name,
    generate_default_constraint_name,
    generate_foreign_key_name,
    generate_primary_key_name,
    generate_unique_constraint_name,
)
from dbmatic.providers.catalog import infer_check_column
from dbmatic.providers.dialect import unwrap_parentheses
from dbmatic.providers.errors import TableParseError

Token = namedtuple("Token", ["kind", "text"])

NAME, WORD, STRING, GROUP, COMMA = "name", "word", "string", "group", "comma"

ColumnFactory = Callable[[str, str, str, bool, bool], DmColumn]

_SQL_COMMENT = Regex(r"--[^\n]*")


def _token(kind: str):
    return lambda t: Token(kind, t[0])


# fmt: off
QUOTED_NAME = (QuotedString('"', esc_quote='""') | QuotedString("`", esc_quote="``")                  # noqa: E221
               | QuotedString("[", end_quote_char="]"))                                               # noqa: E221
BARE_NAME   = Word(alphanums + "_$")                                                                  # noqa: E221
IDENTIFIER  = QUOTED_NAME | BARE_NAME                                                                 # noqa: E221
STRING_LIT  = QuotedString("'", esc_quote="''", unquote_results=False).set_parse_action(_token(STRING))  # noqa: E221
PAREN_GROUP = original_text_for(nested_expr("(", ")")).add_parse_action(_token(GROUP))               # noqa: E221
NAME_TOKEN  = QUOTED_NAME.copy().set_parse_action(_token(NAME))                                       # noqa: E221
WORD_TOKEN  = Word(printables, exclude_chars="(),'\"`[]").set_parse_action(_token(WORD))              # noqa: E221
COMMA_TOKEN = Literal(",").set_parse_action(_token(COMMA))                                            # noqa: E221
TOKENS      = ZeroOrMore(STRING_LIT | PAREN_GROUP | NAME_TOKEN | COMMA_TOKEN | WORD_TOKEN)            # noqa: E221
CREATE      = (CaselessKeyword("CREATE")                                                              # noqa: E221
               + Opt(CaselessKeyword("TEMPORARY") | CaselessKeyword("TEMP"))                          # noqa: E221
               + CaselessKeyword("TABLE")                                                             # noqa: E221
               + Opt(CaselessKeyword("IF") + CaselessKeyword("NOT") + CaselessKeyword("EXISTS")))     # noqa: E221
STATEMENT   = (Suppress(CREATE) + Group(IDENTIFIER + ZeroOrMore(Suppress(".") + IDENTIFIER))                # noqa: E221
               + original_text_for(nested_expr("(", ")")) + Opt(Suppress(Regex(r"[^(]+"))))          # noqa: E221
# fmt: on

for _grammar in (TOKENS, STATEMENT):
    _grammar.ignore(c_style_comment)
    _grammar.ignore(_SQL_COMMENT)

_COLUMN_CONSTRAINT_WORDS = {
    "CONSTRAINT",
    "PRIMARY",
    "NOT",
    "NULL",
    "UNIQUE",
    "CHECK",
    "DEFAULT",
    "COLLATE",
    "REFERENCES",
    "GENERATED",
    "AS",
}
_TABLE_CONSTRAINT_WORDS = {"CONSTRAINT", "PRIMARY", "UNIQUE", "CHECK", "FOREIGN"}


def tokenize(text: str) -> List[Token]:
    """Split SQL text into names, words, string literals, parenthesized groups and commas.

    :param text: the text to split
    :returns: the tokens
    :raises: TableParseError
    """
    try:
        return list(TOKENS.parse_string(text, parse_all=True))
    except ParseBaseException as x:
        raise TableParseError(f"Cannot tokenize '{text}': {x.msg}") from x


def split_definitions(tokens: List[Token]) -> List[List[Token]]:
    """Split a token list on its commas, parenthesized groups keep their commas."""
    definitions = [[]]
    for token in tokens:
        if token.kind == COMMA:
            definitions.append([])
        else:
            definitions[-1].append(token)
    return [d for d in definitions if d]


def _inner(group: str) -> str:
    return group.strip()[1:-1]


def _is_word(token: Optional[Token], *words: str) -> bool:
    return token is not None and token.kind == WORD and token.text.upper() in words


def key_columns(group: str) -> List[DmOrderedColumn]:
    """Parse a parenthesized key column list such as ``("id", created DESC)``."""
    columns = []
    for definition in split_definitions(tokenize(_inner(group))):
        order = DmColumnOrder.ASCENDING
        if any(_is_word(t, "DESC") for t in definition[1:]):
            order = DmColumnOrder.DESCENDING
        columns.append(DmOrderedColumn(definition[0].text, order))
    return columns


class _Cursor:
    """Walks the tokens of one column or table constraint definition."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.position = 0

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.position + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def next(self) -> Optional[Token]:
        token = self.peek()
        self.position += 1
        return token

    def accept(self, *words: str) -> bool:
        if _is_word(self.peek(), *words):
            self.position += 1
            return True
        return False

    def accept_group(self) -> Optional[str]:
        token = self.peek()
        if token is not None and token.kind == GROUP:
            self.position += 1
            return token.text
        return None

    def done(self) -> bool:
        return self.position >= len(self.tokens)


def _action(cursor: _Cursor) -> DmForeignKeyAction:
    first = cursor.next()
    text = first.text if first is not None else ""
    if text.upper() in ("SET", "NO"):
        second = cursor.next()
        text = f"{text} {second.text if second is not None else ''}"
    return DmForeignKeyAction.parse(text)


def _references(cursor: _Cursor):
    """Read ``table [(columns)] [ON DELETE action] [ON UPDATE action] ...`` after REFERENCES."""
    table_token = cursor.next()
    if table_token is None:
        raise TableParseError("REFERENCES is missing its table")
    group = cursor.accept_group()
    columns = key_columns(group) if group else []
    on_delete = on_update = DmForeignKeyAction.NO_ACTION
    while not cursor.done():
        if cursor.accept("ON"):
            if cursor.accept("DELETE"):
                on_delete = _action(cursor)
            elif cursor.accept("UPDATE"):
                on_update = _action(cursor)
            else:
                cursor.next()
        elif cursor.accept("MATCH"):
            cursor.next()
        elif cursor.accept("NOT", "DEFERRABLE", "INITIALLY", "DEFERRED", "IMMEDIATE"):
            continue
        else:
            break
    return table_token.text, columns, on_delete, on_update


def _skip_conflict_clause(cursor: _Cursor):
    if _is_word(cursor.peek(), "ON") and _is_word(cursor.peek(1), "CONFLICT"):
        cursor.position += 3


def _default_expression(cursor: _Cursor) -> str:
    group = cursor.accept_group()
    if group is not None:
        return unwrap_parentheses(group)
    token = cursor.next()
    if token is None:
        raise TableParseError("DEFAULT is missing its value")
    if token.text in ("+", "-"):
        following = cursor.next()
        return token.text + (following.text if following is not None else "")
    return token.text


class CreateTableParser:
    """Turns a stored CREATE TABLE statement into a table, with the names of unnamed constraints generated."""

    def __init__(self, column_factory: ColumnFactory):
        """Construct a parser.

        :param column_factory: builds a column from its table name, column name, declared type,
            nullability and auto increment flag
        """
        self.column_factory = column_factory

    def parse(self, sql: str) -> DmTable:
        """Parse a CREATE TABLE statement.

        :param sql: the statement
        :returns: the table, its column flags are not set
        :raises: TableParseError
        """
        try:
            result = STATEMENT.parse_string(sql.strip(), parse_all=True)
        except ParseBaseException as x:
            raise TableParseError(f"Cannot parse CREATE TABLE statement: {x.msg}\n{x.line}") from x
        name, body = result[0], result[1]
        table = DmTable(None, name[-1])
        definitions = split_definitions(tokenize(_inner(body)))
        constraints = []
        for definition in definitions:
            if _is_word(definition[0], *_TABLE_CONSTRAINT_WORDS):
                constraints.append(definition)
            else:
                self._column(table, _Cursor(definition))
        for definition in constraints:
            self._table_constraint(table, _Cursor(definition))
        return table

    def _column(self, table: DmTable, cursor: _Cursor):
        table_name = table.table_name
        column_name = cursor.next().text
        type_words = []
        while cursor.peek() is not None and cursor.peek().kind == WORD:
            if cursor.peek().text.upper() in _COLUMN_CONSTRAINT_WORDS:
                break
            type_words.append(cursor.next().text)
        data_type = " ".join(type_words)
        if type_words:
            arguments = cursor.accept_group()
            if arguments:
                data_type += "".join(arguments.split())
        is_nullable, is_auto_increment = True, False
        pending = []
        name = None
        while not cursor.done():
            if cursor.accept("CONSTRAINT"):
                name = cursor.next().text
                continue
            if cursor.accept("PRIMARY"):
                cursor.accept("KEY")
                descending = cursor.accept("DESC")
                cursor.accept("ASC")
                _skip_conflict_clause(cursor)
                is_auto_increment = cursor.accept("AUTOINCREMENT")
                is_nullable = False
                key = [DmOrderedColumn(column_name, DmColumnOrder.DESCENDING if descending else DmColumnOrder.ASCENDING)]
                table.primary_key_constraint = DmPrimaryKeyConstraint(
                    None, table_name, name or generate_primary_key_name(table_name, [column_name]), key
                )
            elif cursor.accept("NOT"):
                cursor.accept("NULL")
                _skip_conflict_clause(cursor)
                is_nullable = False
            elif cursor.accept("NULL"):
                is_nullable = True
            elif cursor.accept("UNIQUE"):
                _skip_conflict_clause(cursor)
                table.unique_constraints.append(
                    DmUniqueConstraint(
                        None,
                        table_name,
                        name or generate_unique_constraint_name(table_name, [column_name]),
                        [column_name],
                    )
                )
            elif cursor.accept("CHECK"):
                expression = unwrap_parentheses(cursor.accept_group() or "")
                table.check_constraints.append(
                    DmCheckConstraint(
                        None,
                        table_name,
                        column_name,
                        name or generate_check_constraint_name(table_name, column_name),
                        expression,
                    )
                )
            elif cursor.accept("DEFAULT"):
                pending.append(
                    DmDefaultConstraint(
                        None,
                        table_name,
                        column_name,
                        name or generate_default_constraint_name(table_name, column_name),
                        _default_expression(cursor),
                    )
                )
            elif cursor.accept("COLLATE"):
                cursor.next()
            elif cursor.accept("REFERENCES"):
                referenced_table, referenced, on_delete, on_update = _references(cursor)
                referenced_names = [c.column_name for c in referenced] or [column_name]
                table.foreign_key_constraints.append(
                    DmForeignKeyConstraint(
                        None,
                        table_name,
                        name
                        or generate_foreign_key_name(table_name, [column_name], referenced_table, referenced_names),
                        [column_name],
                        referenced_table,
                        referenced_names,
                        on_delete,
                        on_update,
                    )
                )
            elif cursor.accept("GENERATED"):
                cursor.accept("ALWAYS")
                continue
            elif cursor.accept("AS"):
                cursor.accept_group()
                cursor.accept("STORED", "VIRTUAL")
            else:
                raise TableParseError(f"Unexpected '{cursor.peek().text}' in column '{column_name}'")
            name = None
        table.columns.append(
            self.column_factory(table_name, column_name, data_type, is_nullable, is_auto_increment)
        )
        table.default_constraints.extend(pending)

    @staticmethod
    def _table_constraint(table: DmTable, cursor: _Cursor):
        table_name = table.table_name
        name = None
        if cursor.accept("CONSTRAINT"):
            name = cursor.next().text
        if cursor.accept("PRIMARY"):
            cursor.accept("KEY")
            columns = key_columns(cursor.accept_group() or "()")
            table.primary_key_constraint = DmPrimaryKeyConstraint(
                None, table_name, name or generate_primary_key_name(table_name, [c.column_name for c in columns]), columns
            )
        elif cursor.accept("UNIQUE"):
            columns = key_columns(cursor.accept_group() or "()")
            table.unique_constraints.append(
                DmUniqueConstraint(
                    None,
                    table_name,
                    name or generate_unique_constraint_name(table_name, [c.column_name for c in columns]),
                    columns,
                )
            )
        elif cursor.accept("CHECK"):
            expression = unwrap_parentheses(cursor.accept_group() or "")
            column_name = infer_check_column(expression, table.column_names)
            table.check_constraints.append(
                DmCheckConstraint(
                    None,
                    table_name,
                    column_name,
                    name or generate_check_constraint_name(table_name, column_name),
                    expression,
                )
            )
        elif cursor.accept("FOREIGN"):
            cursor.accept("KEY")
            source = [c.column_name for c in key_columns(cursor.accept_group() or "()")]
            if not cursor.accept("REFERENCES"):
                raise TableParseError(f"FOREIGN KEY on table '{table_name}' is missing REFERENCES")
            referenced_table, referenced, on_delete, on_update = _references(cursor)
            referenced_names = [c.column_name for c in referenced] or source
            table.foreign_key_constraints.append(
                DmForeignKeyConstraint(
                    None,
                    table_name,
                    name or generate_foreign_key_name(table_name, source, referenced_table, referenced_names),
                    source,
                    referenced_table,
                    referenced_names,
                    on_delete,
                    on_update,
                )
            )
        else:
            raise TableParseError(f"Unexpected table constraint on table '{table_name}'")
