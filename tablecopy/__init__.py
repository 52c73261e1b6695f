"""
tablecopy
=========

Copy one table to another database connection or to a flat file by
reconciling schemas and driving an external bulk-copy tool.

Modules
-------
- :mod:`tablecopy.templating`: ``${tag}`` command templates
- :mod:`tablecopy.diffing`: source/destination column comparison
- :mod:`tablecopy.ddl`: CREATE TABLE synthesis
- :mod:`tablecopy.introspection`: connections and column metadata
- :mod:`tablecopy.transfer`: the transfer sequence
- :mod:`tablecopy.cli`: command-line entry point
"""

from .ddl import create_table_statement
from .diffing import diff_columns
from .models import ColumnDescriptor, Endpoint, TableSchema
from .templating import TagSet, render
from .transfer import Transfer, TransferState

__all__ = [
    "ColumnDescriptor",
    "Endpoint",
    "TableSchema",
    "TagSet",
    "Transfer",
    "TransferState",
    "create_table_statement",
    "diff_columns",
    "render",
]
