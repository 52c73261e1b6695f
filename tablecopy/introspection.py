"""
introspection
=============

Database access for the transfer: connections, column metadata, row counts
and raw DDL execution.

The rest of the codebase only sees :class:`DatabaseIntrospector`:

- input: table name
- output: :class:`~tablecopy.models.TableSchema` / row count

Connections are opened through :class:`ConnectionPool`, once per connection
name and run. The ``driver`` key of a connection's settings chooses the
DB-API driver:

- ``mssql`` (default): ``pymssql``
- ``snowflake``: ``snowflake-connector-python``

Both drivers use the ``pyformat`` parameter style.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Tuple

from .errors import ConfigError, DatabaseError
from .models import ColumnDescriptor, TableSchema

Q_TABLE_COLUMNS = """
SELECT
  COLUMN_NAME,
  DATA_TYPE,
  IS_NULLABLE,
  CHARACTER_MAXIMUM_LENGTH,
  NUMERIC_PRECISION,
  NUMERIC_SCALE,
  COLUMN_DEFAULT
FROM INFORMATION_SCHEMA.COLUMNS
WHERE TABLE_NAME = %(table_name)s
ORDER BY ORDINAL_POSITION;
"""

DEFAULT_DRIVER = "mssql"


def q_row_count(table: str) -> str:
    """COUNT(*) query for a table."""
    return f"SELECT COUNT(*) AS count FROM {table};"


def _connect_mssql(settings: Dict[str, Any]) -> Tuple[Any, Tuple[type, ...]]:
    try:
        import pymssql
    except ImportError as e:
        raise ConfigError(
            "pymssql is required for SQL Server connections. "
            "Install it with: pip install pymssql"
        ) from e
    params = dict(settings)
    if "server" not in params and "host" in params:
        params["server"] = params.pop("host")
    # mssql-style settings may carry driver options that pymssql does not accept
    params.pop("options", None)
    try:
        return pymssql.connect(**params), (pymssql.Error,)
    except pymssql.Error as e:
        raise DatabaseError(f"Failed to connect to SQL Server: {e}") from e


def _connect_snowflake(settings: Dict[str, Any]) -> Tuple[Any, Tuple[type, ...]]:
    try:
        import snowflake.connector
        from snowflake.connector.errors import Error as SnowflakeError
    except ImportError as e:
        raise ConfigError(
            "snowflake-connector-python is required for Snowflake connections. "
            "Install it with: pip install snowflake-connector-python"
        ) from e
    try:
        return snowflake.connector.connect(**settings), (SnowflakeError,)
    except SnowflakeError as e:
        raise DatabaseError(f"Failed to connect to Snowflake: {e}") from e


DRIVERS: Dict[str, Callable[[Dict[str, Any]], Tuple[Any, Tuple[type, ...]]]] = {
    "mssql": _connect_mssql,
    "snowflake": _connect_snowflake,
}


def driver_settings(settings: Mapping[str, Any]) -> Dict[str, Any]:
    """Return connection settings without the ``driver`` selector."""
    return {k: v for k, v in settings.items() if k != "driver"}


class DatabaseIntrospector:
    """Schema and row-count queries against one open DB-API connection.

    Parameters
    ----------
    connection:
        An open DB-API connection.
    name:
        Connection name from the config (for messages).
    settings:
        The connection settings; exposed to command templates.
    errors:
        Driver exception classes to wrap as :class:`DatabaseError`.
    """

    def __init__(
        self,
        connection: Any,
        name: str,
        settings: Mapping[str, Any],
        errors: Tuple[type, ...] = (),
    ) -> None:
        self.connection = connection
        self.name = name
        self.settings = dict(settings)
        self._errors = errors or (Exception,)

    @property
    def database(self) -> str:
        return str(self.settings.get("database", ""))

    def _query(self, sql: str, params: Mapping[str, Any] | None = None) -> List[Dict[str, Any]]:
        cursor = self.connection.cursor()
        try:
            if params is None:
                cursor.execute(sql)
            else:
                cursor.execute(sql, params)
            labels = [d[0] for d in (cursor.description or [])]
            return [dict(zip(labels, row)) for row in cursor.fetchall()]
        except self._errors as e:
            raise DatabaseError(f"Query failed on {self.name}: {e}") from e
        finally:
            cursor.close()

    def columns(self, table: str) -> TableSchema:
        """Return the ordered columns of *table* (empty when it does not exist)."""
        rows = self._query(Q_TABLE_COLUMNS, {"table_name": table})
        return TableSchema(table=table, columns=tuple(ColumnDescriptor.from_row(r) for r in rows))

    def row_count(self, table: str) -> int:
        """Return the number of rows in *table*."""
        rows = self._query(q_row_count(table))
        if not rows:
            return 0
        return int(next(iter(rows[0].values())) or 0)

    def execute(self, statement: str) -> None:
        """Execute a raw statement and commit."""
        cursor = self.connection.cursor()
        try:
            cursor.execute(statement)
            self.connection.commit()
        except self._errors as e:
            raise DatabaseError(f"Statement failed on {self.name}: {e}") from e
        finally:
            cursor.close()


class ConnectionPool:
    """Opens one connection per connection name and reuses it."""

    def __init__(self) -> None:
        self._open: Dict[str, DatabaseIntrospector] = {}

    def get(self, name: str, settings: Mapping[str, Any]) -> DatabaseIntrospector:
        """Return the introspector for *name*, connecting on first use.

        Raises
        ------
        ConfigError
            If the ``driver`` setting names an unknown driver.
        DatabaseError
            If the connection cannot be opened.
        """
        if name in self._open:
            return self._open[name]

        driver = str(settings.get("driver", DEFAULT_DRIVER)).lower()
        connect = DRIVERS.get(driver)
        if connect is None:
            raise ConfigError(f"Unknown driver {driver!r} for connection {name}")

        connection, errors = connect(driver_settings(settings))
        introspector = DatabaseIntrospector(connection, name, driver_settings(settings), errors)
        self._open[name] = introspector
        return introspector

    def close_all(self) -> None:
        """Close every connection opened by this pool."""
        for introspector in self._open.values():
            introspector.connection.close()
        self._open.clear()
