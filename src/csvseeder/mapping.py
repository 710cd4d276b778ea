"""Projection of positional CSV rows onto destination table columns.

A mapping is an ordered ``{csv_index: column_name}`` dict. Rows go through
three steps, always in this order:

1. mapping  - pick the mapped fields by index; missing or empty fields become None
2. aliasing - rename CSV column names to their DB column names
3. hashing  - replace the values of hashable columns with a one-way hash
"""

from typing import Iterable, Sequence

from csvseeder.hashing import bcrypt_hash
from csvseeder.reader import strip_utf8_bom
from csvseeder.types import Hasher, Mapping, Row


def normalize_mapping(mapping: dict | Sequence[str] | None) -> Mapping:
    """Turn a list of column names or an index->name dict into a Mapping."""
    if not mapping:
        return {}
    if isinstance(mapping, dict):
        return {int(index): str(column) for index, column in mapping.items()}
    return {index: str(column) for index, column in enumerate(mapping)}


def alias_column(column: str, aliases: dict[str, str] | None) -> str:
    if aliases and column in aliases:
        return aliases[column]
    return column


def alias_columns(columns: Row, aliases: dict[str, str] | None) -> Row:
    """Rename aliased keys of a row dict, keeping their values."""
    columns = dict(columns)
    for csv_column, alias in (aliases or {}).items():
        if csv_column in columns:
            columns[alias] = columns.pop(csv_column)
    return columns


def clean_mapping(
    mapping: dict | Sequence[str] | None,
    table_columns: Iterable[str],
    aliases: dict[str, str] | None = None,
) -> Mapping:
    """Drop mapped columns that don't exist on the table once aliased.

    Surviving entries keep their unaliased names; aliasing happens per row.
    """
    columns = normalize_mapping(mapping)
    if 0 in columns:
        columns[0] = strip_utf8_bom(columns[0])

    allowed = set(table_columns)
    return {
        index: column
        for index, column in columns.items()
        if alias_column(column, aliases) in allowed
    }


def is_header_row(row: Sequence[str], mapping: Mapping) -> bool:
    """True if the row's values equal the mapped column names at the same positions."""
    if not row:
        return False
    row = [strip_utf8_bom(row[0]), *row[1:]]
    return all(row[index] == column for index, column in mapping.items() if index < len(row))


def hash_columns(columns: Row, hashable: Iterable[str], hasher: Hasher = bcrypt_hash) -> Row:
    columns = dict(columns)
    for column in hashable:
        if columns.get(column) is not None:
            columns[column] = hasher(columns[column])
    return columns


def parse_row(
    row: Sequence[str],
    mapping: Mapping,
    aliases: dict[str, str] | None = None,
    hashable: Iterable[str] = (),
    hasher: Hasher = bcrypt_hash,
) -> Row:
    """Turn a CSV row into a DB-insertable dict."""
    columns: Row = {}
    for index, column in mapping.items():
        value = row[index] if index < len(row) else None
        columns[column] = value if value else None

    columns = alias_columns(columns, aliases)
    return hash_columns(columns, hashable, hasher)


def is_empty_row(columns: Row) -> bool:
    return all(value is None for value in columns.values())
