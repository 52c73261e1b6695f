"""
transfer
========

Orchestrates one table transfer from a source endpoint to a destination
endpoint.

Sequence
--------
1. Resolve endpoints from ``connection:table`` / ``file:path`` specifiers.
2. Refuse identical endpoints and file-to-file transfers.
3. Check files on disk and introspect database tables.
4. Reconcile schemas: create the destination table (or write its DDL next to
   a destination file), or diff the columns of an existing table.
5. Refuse a destination table that already has rows.
6. Export from the source with the ``download`` command template.
7. Import into the destination with the ``upload`` command template.

Every failed check raises a :class:`~tablecopy.errors.TransferError` before
any external command runs. The only destructive step before the commands is
the ``CREATE TABLE``; nothing is rolled back if a command later fails.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .config import TransferConfig
from .ddl import create_table_statement
from .diffing import diff_columns
from .errors import (
    EXIT_NOT_EMPTY,
    SchemaMismatchError,
    TransferError,
    UsageError,
    ValidationError,
)
from .introspection import ConnectionPool, DatabaseIntrospector
from .models import Endpoint, TableSchema, make_endpoint, split_specifier
from .process import format_command, run_command, split_command
from .templating import render

DEFAULT_BATCH_SIZE = 10000


class TransferState(enum.Enum):
    INIT = "init"
    RESOLVE_ENDPOINTS = "resolve_endpoints"
    VALIDATE_DISTINCTNESS = "validate_distinctness"
    INTROSPECT = "introspect"
    RECONCILE_SCHEMA = "reconcile_schema"
    VALIDATE_DESTINATION_EMPTY = "validate_destination_empty"
    EXPORT = "export"
    IMPORT = "import"
    DONE = "done"
    ABORTED = "aborted"


def resolve_endpoints(src: Optional[str], dest: Optional[str]) -> Tuple[Endpoint, Endpoint]:
    """Parse source/destination specifiers.

    The destination table defaults to the source table name.

    Raises
    ------
    UsageError
        If either specifier lacks a connection or the source lacks a table.
    """
    src_conn, src_table = split_specifier(src)
    dest_conn, dest_table = split_specifier(dest)
    dest_table = dest_table or src_table
    if not src_conn or not src_table or not dest_conn or not dest_table:
        raise UsageError("Both --src and --dest must be given as connection:table or file:path")
    return make_endpoint(src_conn, src_table), make_endpoint(dest_conn, dest_table)


def temp_file_for(source: Endpoint, dest: Endpoint, default: str) -> str:
    """Return the file shared by the export and import commands."""
    if dest.is_file:
        return dest.table
    if source.is_file:
        return source.table
    return default


def create_sql_path(dest: Endpoint) -> Path:
    """Return ``<dest basename>-create.sql`` next to a destination file."""
    path = Path(dest.table)
    return path.with_name(f"{path.name}-create.sql")


class Transfer:
    """One run of the transfer state machine.

    Parameters
    ----------
    config:
        Loaded connections and command templates.
    source, dest:
        Resolved endpoints.
    batch_size:
        Passed to the command templates as ``${batchSize}``.
    pool:
        Connection pool; one is created (and closed after the run) if omitted.
    runner:
        Executes an argument vector; defaults to :func:`run_command`.
    """

    def __init__(
        self,
        config: TransferConfig,
        source: Endpoint,
        dest: Endpoint,
        batch_size: int = DEFAULT_BATCH_SIZE,
        pool: Optional[Any] = None,
        runner: Callable[[Sequence[str]], None] = run_command,
    ) -> None:
        self.config = config
        self.source = source
        self.dest = dest
        self.batch_size = batch_size
        self._owns_pool = pool is None
        self.pool = pool if pool is not None else ConnectionPool()
        self.runner = runner
        self.state = TransferState.INIT
        self.history: List[TransferState] = [TransferState.INIT]
        self.create_statement: Optional[str] = None
        self._src_db: Optional[DatabaseIntrospector] = None
        self._dest_db: Optional[DatabaseIntrospector] = None

    @classmethod
    def from_specifiers(cls, config: TransferConfig, src: Optional[str], dest: Optional[str], **kwargs: Any) -> "Transfer":
        source, destination = resolve_endpoints(src, dest)
        transfer = cls(config, source, destination, **kwargs)
        transfer._enter(TransferState.RESOLVE_ENDPOINTS)
        return transfer

    def _enter(self, state: TransferState) -> None:
        self.state = state
        self.history.append(state)

    # ---- public ----
    def run(self) -> None:
        """Run all stages; raises :class:`TransferError` on any abort."""
        try:
            self.validate_distinctness()
            src_schema, dest_schema = self.introspect()
            self.reconcile_schema(src_schema, dest_schema)
            self.validate_destination_empty()
            self.export()
            self.import_()
            self._enter(TransferState.DONE)
        except TransferError:
            self._enter(TransferState.ABORTED)
            raise
        finally:
            if self._owns_pool:
                self.pool.close_all()

    # ---- stages ----
    def validate_distinctness(self) -> None:
        self._enter(TransferState.VALIDATE_DISTINCTNESS)
        if self.source.same_location(self.dest):
            raise ValidationError("Source and destination tables are the same")
        if self.source.is_file and self.dest.is_file:
            raise ValidationError("Source and destination connections cannot be both file")
        print(f"Copying {self.source.describe()} to {self.dest.describe()}")

    def introspect(self) -> Tuple[Optional[TableSchema], Optional[TableSchema]]:
        """Check file endpoints on disk and fetch columns of table endpoints."""
        self._enter(TransferState.INTROSPECT)
        src_schema: Optional[TableSchema] = None
        dest_schema: Optional[TableSchema] = None

        if self.source.is_file:
            if not Path(self.source.table).exists():
                raise ValidationError(f"Source file {self.source.table} not found")
        else:
            self._src_db = self._connect(self.source)
            src_schema = self._fetch_columns(self._src_db, self.source)
            if not src_schema.exists:
                raise ValidationError(
                    f"Table {self.source.table} not found in source connection {self.source.connection}."
                )

        if self.dest.is_file:
            if Path(self.dest.table).exists():
                raise ValidationError(f"Destination file {self.dest.table} already exists")
        else:
            self._dest_db = self._connect(self.dest)
            dest_schema = self._fetch_columns(self._dest_db, self.dest)

        return src_schema, dest_schema

    def reconcile_schema(self, src_schema: Optional[TableSchema], dest_schema: Optional[TableSchema]) -> None:
        """Create, describe or diff the destination table."""
        self._enter(TransferState.RECONCILE_SCHEMA)

        if src_schema is None:
            if dest_schema is not None and not dest_schema.exists:
                raise ValidationError(
                    f"Table {self.dest.table} not found in destination connection {self.dest.connection}; "
                    "it cannot be created from a file source."
                )
            return

        if self.dest.is_file:
            self.create_statement = create_table_statement(src_schema.columns, self.source.table)
            sql_file = create_sql_path(self.dest)
            print(f"Writing create table SQL to {sql_file}")
            try:
                sql_file.write_text(self.create_statement, encoding="utf-8")
            except OSError as e:
                raise ValidationError(f"Cannot write create table SQL to {sql_file}: {e}") from e
            return

        if dest_schema is None:
            raise ValidationError(f"{self.dest.describe()} has not been introspected")
        if not dest_schema.exists:
            self.create_statement = create_table_statement(src_schema.columns, self.dest.table)
            print(f"Table {self.dest.table} not found in destination connection {self.dest.connection}.")
            print("Creating target table...")
            print("Utility has limitations on creating tables. Please make sure the table is created with the correct schema.")
            self._database(self.dest).execute(self.create_statement)
            return

        errors = diff_columns(src_schema.columns, dest_schema.columns)
        if errors:
            raise SchemaMismatchError(errors)

    def validate_destination_empty(self) -> None:
        self._enter(TransferState.VALIDATE_DESTINATION_EMPTY)
        if self.dest.is_file:
            return
        count = self._database(self.dest).row_count(self.dest.table)
        if count:
            raise ValidationError(f"Table {self.dest.table} already has {count} rows. Aborting...", EXIT_NOT_EMPTY)

    def export(self) -> None:
        """Run the download command (table sources only)."""
        self._enter(TransferState.EXPORT)
        if self.source.is_file:
            return
        db = self._database(self.source)
        print(f"Fetching data from {self.source.connection} {db.database} > {self.source.table}...")
        argv = self.build_command("download", {"sourceTable": self.source.table}, db.settings)
        print(format_command(argv))
        self.runner(argv)

    def import_(self) -> None:
        """Run the upload command (table destinations only)."""
        self._enter(TransferState.IMPORT)
        if self.dest.is_file:
            return
        db = self._database(self.dest)
        print(f"Pushing data to {self.dest.connection} {db.database} > {self.dest.table}...")
        argv = self.build_command("upload", {"targetTable": self.dest.table}, db.settings)
        print(format_command(argv))
        self.runner(argv)

    # ---- helpers ----
    def tags(self, table_tags: Mapping[str, Any], settings: Mapping[str, Any]) -> Dict[str, Any]:
        """Tag values for a command: connection settings plus transfer values."""
        tags: Dict[str, Any] = dict(settings)
        tags["connection"] = {k: v for k, v in settings.items() if not isinstance(v, Mapping)}
        tags.update(table_tags)
        tags["tempFileName"] = temp_file_for(self.source, self.dest, self.config.temp_file_name)
        tags["batchSize"] = self.batch_size
        return tags

    def build_command(self, kind: str, table_tags: Mapping[str, Any], settings: Mapping[str, Any]) -> List[str]:
        """Render the ``download``/``upload`` template into an argument vector."""
        template = self.config.command(kind)
        tags = self.tags(table_tags, settings)
        if isinstance(template, str):
            return split_command(render(template, tags))
        return [render(str(part), tags) for part in template]

    def _database(self, endpoint: Endpoint) -> DatabaseIntrospector:
        """Return the introspector opened for *endpoint* by :meth:`introspect`."""
        db = self._src_db if endpoint is self.source else self._dest_db
        if db is None:
            raise ValidationError(f"{endpoint.describe()} has not been introspected")
        return db

    def _connect(self, endpoint: Endpoint) -> DatabaseIntrospector:
        if endpoint.connection is None:
            raise ValidationError(f"{endpoint.describe()} has no database connection")
        settings = self.config.connection(endpoint.connection)
        print(f"Connecting to {endpoint.connection}...")
        return self.pool.get(endpoint.connection, settings)

    def _fetch_columns(self, db: DatabaseIntrospector, endpoint: Endpoint) -> TableSchema:
        print(f"Fetching table information for {db.database} > {endpoint.table}...")
        return db.columns(endpoint.table)
