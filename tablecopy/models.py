"""
models
======

Value types shared by the transfer modules.

- :class:`Endpoint`: where table data comes from or goes to
- :class:`ColumnDescriptor`: one column of ``INFORMATION_SCHEMA.COLUMNS``
- :class:`TableSchema`: the introspected columns of one table
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

FILE_CONNECTION = "file"


@dataclass(frozen=True)
class Endpoint:
    """A source or destination location for table data.

    Attributes:
        connection: Connection name from the config, or None for files.
        table: Table name, or file path when ``is_file`` is set.
        is_file: True for flat-file endpoints.
    """

    connection: Optional[str]
    table: str
    is_file: bool = False

    def describe(self) -> str:
        """Return a human-readable description for logs."""
        if self.is_file:
            return f"file {self.table}"
        return f"{self.connection} > {self.table}"

    def same_location(self, other: "Endpoint") -> bool:
        return self.connection == other.connection and self.table == other.table


def split_specifier(value: Optional[str]) -> Tuple[str, str]:
    """Split ``"connection:table"`` on the first colon.

    >>> split_specifier("dbA:orders")
    ('dbA', 'orders')
    >>> split_specifier("file:C:/exports/orders.bcp")
    ('file', 'C:/exports/orders.bcp')
    """
    connection, _, table = (value or "").partition(":")
    return connection.strip(), table.strip()


def make_endpoint(connection: str, table: str) -> Endpoint:
    """Build an endpoint; the ``file`` connection name marks a file path."""
    if connection == FILE_CONNECTION:
        return Endpoint(connection=None, table=table, is_file=True)
    return Endpoint(connection=connection, table=table)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


@dataclass(frozen=True)
class ColumnDescriptor:
    """Normalized metadata for one table column."""

    name: str
    data_type: Optional[str]
    is_nullable: bool = True
    max_length: Optional[int] = None  # -1 means MAX
    numeric_precision: Optional[int] = None
    numeric_scale: Optional[int] = None
    default_value: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ColumnDescriptor":
        """Build a descriptor from an ``INFORMATION_SCHEMA.COLUMNS`` row.

        Keys are matched case-insensitively since drivers differ in how they
        report column labels.
        """
        r = {str(k).upper(): v for k, v in row.items()}
        default = r.get("COLUMN_DEFAULT")
        return cls(
            name=str(r["COLUMN_NAME"]),
            data_type=r.get("DATA_TYPE") or None,
            is_nullable=str(r.get("IS_NULLABLE", "YES")).upper() != "NO",
            max_length=_optional_int(r.get("CHARACTER_MAXIMUM_LENGTH")),
            numeric_precision=_optional_int(r.get("NUMERIC_PRECISION")),
            numeric_scale=_optional_int(r.get("NUMERIC_SCALE")),
            default_value=None if default is None else str(default),
        )


@dataclass(frozen=True)
class TableSchema:
    """Introspection result for one table; no columns means no table."""

    table: str
    columns: Tuple[ColumnDescriptor, ...] = ()

    @property
    def exists(self) -> bool:
        return bool(self.columns)
