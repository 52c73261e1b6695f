"""Shared fixtures: in-memory stand-ins for database connections."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

import pytest

from tablecopy.config import TransferConfig
from tablecopy.models import ColumnDescriptor, TableSchema


class FakeDatabase:
    """Mimics DatabaseIntrospector for one connection."""

    def __init__(
        self,
        name: str,
        settings: Optional[Mapping[str, Any]] = None,
        tables: Optional[Dict[str, Sequence[ColumnDescriptor]]] = None,
        row_counts: Optional[Dict[str, int]] = None,
    ) -> None:
        self.name = name
        self.settings = dict(settings or {"server": f"{name}-host", "database": f"{name}_db"})
        self.tables = dict(tables or {})
        self.row_counts = dict(row_counts or {})
        self.executed: List[str] = []

    @property
    def database(self) -> str:
        return str(self.settings.get("database", ""))

    def columns(self, table: str) -> TableSchema:
        return TableSchema(table=table, columns=tuple(self.tables.get(table, ())))

    def row_count(self, table: str) -> int:
        return self.row_counts.get(table, 0)

    def execute(self, statement: str) -> None:
        self.executed.append(statement)


class FakePool:
    """Mimics ConnectionPool, recording which connections were requested."""

    def __init__(self, *databases: FakeDatabase) -> None:
        self.databases = {db.name: db for db in databases}
        self.requested: List[str] = []
        self.closed = False

    def get(self, name: str, settings: Mapping[str, Any]) -> FakeDatabase:
        self.requested.append(name)
        return self.databases[name]

    def close_all(self) -> None:
        self.closed = True


class RecordingRunner:
    """Collects argument vectors instead of running them."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []

    def __call__(self, argv: Sequence[str]) -> None:
        self.calls.append(list(argv))


@pytest.fixture
def orders_columns() -> List[ColumnDescriptor]:
    return [
        ColumnDescriptor("id", "int", is_nullable=False, numeric_precision=None),
        ColumnDescriptor("customer", "nvarchar", max_length=100),
        ColumnDescriptor("notes", "nvarchar", max_length=-1),
    ]


@pytest.fixture
def transfer_config() -> TransferConfig:
    return TransferConfig(
        connections={
            "dbA": {"server": "dbA-host", "database": "dbA_db", "user": "sa"},
            "dbB": {"server": "dbB-host", "database": "dbB_db", "user": "sa"},
        },
        download="bcp ${sourceTable} out ${tempFileName} -S ${server} -d ${database} -U ${user} -n",
        upload="bcp ${targetTable} in ${tempFileName} -S ${server} -d ${database} -U ${user} -n -b ${batchSize}",
    )


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()
