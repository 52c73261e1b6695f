"""
diffing
=======

Column-level comparison of a source and a destination table.

The comparison is name based (column order may differ between the two
tables) and only looks at the data type and the character maximum length.
Numeric precision and scale are intentionally left out of the comparison even
though :mod:`tablecopy.ddl` renders them.

Primary API
-----------
- :func:`diff_columns`
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .models import ColumnDescriptor


def format_length(value: Optional[int]) -> str:
    """Render a max length for messages (``null`` when absent)."""
    return "null" if value is None else str(value)


def column_mismatch(source: ColumnDescriptor, dest: Optional[ColumnDescriptor]) -> Optional[str]:
    """Return the mismatch message for one source column, or None if it matches."""
    if dest is None:
        return f"{source.name}: Column not found in destination database"
    if dest.data_type != source.data_type or dest.max_length != source.max_length:
        return (
            f"{source.name}: Data type mismatch "
            f"{dest.data_type} {format_length(dest.max_length)} != "
            f"{source.data_type} {format_length(source.max_length)}"
        )
    return None


def diff_columns(source_columns: Sequence[ColumnDescriptor], dest_columns: Sequence[ColumnDescriptor]) -> List[str]:
    """Compare two column lists and return a mismatch report.

    Parameters
    ----------
    source_columns, dest_columns:
        Columns in ordinal order.

    Returns
    -------
    list[str]
        One message per missing, mismatched or extra column. Source-side
        messages come first in source order, then extra destination columns
        in destination order. An empty list means the schemas are compatible.
    """
    dest_by_name: Dict[str, ColumnDescriptor] = {c.name: c for c in dest_columns}
    source_names = {c.name for c in source_columns}

    errors: List[str] = []
    for column in source_columns:
        error = column_mismatch(column, dest_by_name.get(column.name))
        if error:
            errors.append(error)

    for column in dest_columns:
        if column.name not in source_names:
            errors.append(f"Extra column found in destination database: {column.name}")

    return errors
