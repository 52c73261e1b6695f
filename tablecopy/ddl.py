"""SQL Server style CREATE TABLE synthesis from introspected columns.

The generated statement is best effort: it reproduces column names, types,
lengths, nullability and defaults, but not keys, indexes or constraints.
"""

from __future__ import annotations

import re
from typing import Sequence

from .errors import MissingDataType
from .models import ColumnDescriptor

_CHAR_TYPE = re.compile(r"CHAR$", re.IGNORECASE)


def is_char_type(data_type: str) -> bool:
    """Return True for ``char``/``varchar``/``nvarchar``-like types."""
    return _CHAR_TYPE.search(data_type) is not None


def column_definition(column: ColumnDescriptor) -> str:
    """Render one column line of a CREATE TABLE statement.

    Raises
    ------
    MissingDataType
        If the column has no data type.
    """
    if not column.data_type:
        raise MissingDataType(column.name)

    is_char = is_char_type(column.data_type)
    out = f"    [{column.name}] {column.data_type}"

    if column.max_length == -1:
        out += "(MAX)"
    elif is_char and column.max_length is not None:
        out += f"({column.max_length})"
    elif column.numeric_precision is not None:
        scale = column.numeric_scale if column.numeric_scale is not None else 0
        out += f"({column.numeric_precision},{scale})"

    if not column.is_nullable:
        out += " NOT NULL"

    if column.default_value:
        out += f" DEFAULT '{column.default_value}'" if is_char else f" DEFAULT {column.default_value}"

    return out


def create_table_statement(columns: Sequence[ColumnDescriptor], table_name: str) -> str:
    """Generate a ``CREATE TABLE`` statement for *table_name*.

    >>> create_table_statement([ColumnDescriptor("id", "int", is_nullable=False)], "dest")
    'CREATE TABLE dest (\\n    [id] int NOT NULL\\n);'
    """
    definitions = [column_definition(c) for c in columns]
    return f"CREATE TABLE {table_name} (\n" + ",\n".join(definitions) + "\n);"
