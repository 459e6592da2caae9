"""Identifier helpers: generated constraint names, LIKE patterns and wildcard matching."""

import re
from typing import Iterable, Optional

_NON_IDENTIFIER = re.compile(r"[^0-9A-Za-z_]")


def to_alpha_numeric(text: str, allowed: str = "") -> str:
    """Remove every character that is not a letter, a digit or one of the allowed characters.

    :param text: the text to clean
    :param allowed: extra characters to keep
    :returns: the cleaned text
    """
    if not text:
        return ""
    return "".join(c for c in text if c.isalnum() or c in allowed)


def to_raw_identifier(*segments: str) -> str:
    """Join segments into an unquoted identifier, keeping only letters, digits and underscores.

    ``to_raw_identifier("pk", "Orders", "id")`` returns ``"pk_Orders_id"``.

    :param segments: the identifier parts
    :returns: the joined identifier
    """
    cleaned = [_NON_IDENTIFIER.sub("", s) for s in segments if s]
    return "_".join(c for c in cleaned if c).strip("_")


def generate_primary_key_name(table_name: str, column_names: Iterable[str]) -> str:
    """Return the generated name of a table's primary key, e.g. ``pk_orders_id``."""
    return to_raw_identifier("pk", table_name, *column_names)


def generate_unique_constraint_name(table_name: str, column_names: Iterable[str]) -> str:
    """Return the generated name of a unique constraint, e.g. ``uc_orders_code``."""
    return to_raw_identifier("uc", table_name, *column_names)


def generate_check_constraint_name(table_name: str, column_name: Optional[str]) -> str:
    """Return the generated name of a check constraint, e.g. ``ck_orders_total``."""
    return to_raw_identifier("ck", table_name, column_name or "")


def generate_default_constraint_name(table_name: str, column_name: str) -> str:
    """Return the generated name of a default constraint, e.g. ``df_orders_created``."""
    return to_raw_identifier("df", table_name, column_name)


def generate_index_name(table_name: str, column_names: Iterable[str]) -> str:
    """Return the generated name of an index, e.g. ``ix_orders_created``."""
    return to_raw_identifier("ix", table_name, *column_names)


def generate_foreign_key_name(
    table_name: str,
    column_names: Iterable[str],
    referenced_table_name: str,
    referenced_column_names: Iterable[str],
) -> str:
    """Return the generated name of a foreign key, e.g. ``fk_orders_customer_id_customers_id``."""
    return to_raw_identifier("fk", table_name, *column_names, referenced_table_name, *referenced_column_names)


def has_wildcards(pattern: Optional[str]) -> bool:
    """Test whether a filter contains ``*`` or ``?`` wildcards."""
    return bool(pattern) and ("*" in pattern or "?" in pattern)


def to_like_pattern(name_filter: Optional[str]) -> str:
    """Convert a ``*`` / ``?`` wildcard filter into a SQL LIKE pattern.

    An empty filter matches everything. A filter without wildcards is returned unchanged, as an exact match.

    :param name_filter: the filter to convert
    :returns: the LIKE pattern
    """
    if not name_filter:
        return "%"
    return name_filter.replace("*", "%").replace("?", "_")


def is_wildcard_match(text: Optional[str], pattern: Optional[str], ignore_case: bool = True) -> bool:
    """Match text against a pattern where ``*`` matches any run of characters and ``?`` any one character.

    Empty text or an empty pattern never match.

    :param text: the text to test
    :param pattern: the wildcard pattern
    :param ignore_case: compare case-insensitively, defaults to True
    :returns: whether the whole text matches the pattern
    """
    if not text or not pattern:
        return False
    if ignore_case:
        text = text.lower()
        pattern = pattern.lower()
    t_idx = p_idx = 0
    star_idx = -1
    match_idx = 0
    while t_idx < len(text):
        if p_idx < len(pattern) and (pattern[p_idx] == "?" or pattern[p_idx] == text[t_idx]):
            t_idx += 1
            p_idx += 1
        elif p_idx < len(pattern) and pattern[p_idx] == "*":
            star_idx = p_idx
            match_idx = t_idx
            p_idx += 1
        elif star_idx != -1:
            p_idx = star_idx + 1
            match_idx += 1
            t_idx = match_idx
        else:
            return False
    while p_idx < len(pattern) and pattern[p_idx] == "*":
        p_idx += 1
    return p_idx == len(pattern)


def matches_filter(name: str, name_filter: Optional[str]) -> bool:
    """Test a name against an optional filter, an empty filter matches every name.

    Filters without wildcards are compared for equality, ignoring case.
    """
    if not name_filter:
        return True
    return is_wildcard_match(name, name_filter)
